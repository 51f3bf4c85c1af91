"""CLI entry point for the webhook relay servers."""

import argparse
import logging
import sys

from fastapi import FastAPI

from hookrelay.config import ReceiverSettings, ServiceSettings, ValidatorSettings, load_settings
from hookrelay.errors.exceptions import ConfigurationError
from hookrelay.logging_config import configure_logging

logger = logging.getLogger(__name__)

_SETTINGS: dict[str, type[ServiceSettings]] = {
    "validator": ValidatorSettings,
    "receiver": ReceiverSettings,
}


def build_app(
    service: str,
    host: str | None = None,
    port: int | None = None,
) -> tuple[ServiceSettings, FastAPI]:
    """Load settings for ``service``, apply CLI overrides and build its app."""
    from hookrelay.main import create_receiver_app, create_validator_app

    settings = load_settings(_SETTINGS[service])
    overrides = {k: v for k, v in (("host", host), ("port", port)) if v is not None}
    if overrides:
        settings = settings.model_copy(update=overrides)

    if service == "validator":
        return settings, create_validator_app(settings)
    return settings, create_receiver_app(settings)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="hookrelay-server",
        description="Two-hop webhook relay: public validator and private receiver",
    )
    parser.add_argument("service", choices=sorted(_SETTINGS), help="Which service to run")
    parser.add_argument("--host", default=None, help="Bind host (default: HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: PORT)")
    parser.add_argument(
        "--console-logs",
        action="store_true",
        help="Colored console logs instead of JSON",
    )
    args = parser.parse_args(argv)

    # Configured before settings load so a configuration failure is still logged
    configure_logging(json_output=not args.console_logs)

    try:
        settings, app = build_app(args.service, host=args.host, port=args.port)
    except ConfigurationError as exc:
        logger.error("Refusing to start %s: %s", args.service, exc)
        sys.exit(1)

    configure_logging(
        log_level=settings.log_level,
        json_output=settings.log_json and not args.console_logs,
        service=app.state.service_name,
    )

    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
