"""Response bodies returned by the validator and the receiver."""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class HealthResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: Literal["ok"] = "ok"
    service: str
    timestamp: int


class ForwardResponse(BaseModel):
    """Validator reply to the webhook provider."""

    model_config = ConfigDict(extra="forbid")

    received: bool
    forwarded: bool
    error: str | None = None


class ReceiverResponse(BaseModel):
    """Receiver reply to the validator."""

    model_config = ConfigDict(extra="forbid")

    success: bool
    message: str | None = None
    error: str | None = None
