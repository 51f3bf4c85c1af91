"""Pydantic models for the provider-agnostic webhook envelope."""

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


class Provider(str, Enum):
    STRIPE = "stripe"
    GITHUB = "github"
    UNKNOWN = "unknown"


class WebhookEnvelope(BaseModel):
    """Normalized webhook passed from the validator to the receiver.

    Built once per inbound request and frozen afterwards.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    provider: Provider
    event: str = Field(..., min_length=1)
    data: Any = None
    raw_body: str | None = Field(None, alias="rawBody")
    timestamp: int = Field(default_factory=now_ms)

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict using the camelCase keys the receiver expects."""
        body = self.model_dump(mode="json", by_alias=True)
        if self.raw_body is None:
            body.pop("rawBody", None)
        return body


class ForwardRequest(BaseModel):
    """Body of the internal validator -> receiver hop."""

    model_config = ConfigDict(frozen=True)

    payload: WebhookEnvelope
    signature: str | None = None

    def to_wire(self) -> dict[str, Any]:
        body: dict[str, Any] = {"payload": self.payload.to_wire()}
        if self.signature is not None:
            body["signature"] = self.signature
        return body
