"""Application configuration via environment variables."""

import logging
from typing import TypeVar

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from hookrelay.errors.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ServiceSettings(BaseSettings):
    """Settings shared by the validator and the receiver."""

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"
    log_json: bool = True

    # Shared secret for the internal hop
    internal_api_key: str = Field(..., min_length=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class ValidatorSettings(ServiceSettings):
    port: int = 3000

    # Stripe
    stripe_webhook_secret: str = ""
    stripe_secret_key: str = ""
    stripe_signature_tolerance: int = 300

    # GitHub (verification is off unless a secret is configured)
    github_webhook_secret: str = ""

    # Receiver hop
    forward_url: str = "http://100.99.47.83:9010/webhook"
    forward_timeout: float = 10.0

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit: str = "100 per 15 minutes"


class ReceiverSettings(ServiceSettings):
    port: int = 9010

    # Overlay network and private LAN; loopback is always allowed
    allowed_networks: list[str] = ["100.64.0.0/10", "10.0.0.0/8"]

    # Formatted message is appended as the final argument
    relay_command: list[str] = Field(
        default_factory=lambda: ["openclaw", "system", "event"], min_length=1
    )
    command_timeout: float = 30.0


SettingsT = TypeVar("SettingsT", bound=ServiceSettings)


def load_settings(settings_cls: type[SettingsT]) -> SettingsT:
    """Build settings from the environment, failing loudly on bad config."""
    try:
        return settings_cls()
    except ValidationError as exc:
        missing = [
            str(err["loc"][0]).upper() for err in exc.errors() if err.get("loc")
        ]
        logger.error("Invalid configuration for %s: %s", settings_cls.__name__, ", ".join(missing))
        raise ConfigurationError(
            f"Invalid or missing settings: {', '.join(missing)}"
        ) from exc
