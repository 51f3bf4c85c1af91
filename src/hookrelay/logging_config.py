"""Structured logging for the relay services, rendered through structlog."""

import logging
import sys

import structlog


def _service_tagger(service: str):
    def add_service(logger, method_name, event_dict):
        event_dict.setdefault("service", service)
        return event_dict

    return add_service


def configure_logging(
    log_level: str = "info",
    json_output: bool = False,
    service: str | None = None,
) -> None:
    """Route stdlib and structlog records through one structlog formatter.

    Args:
        log_level: Logging level string (debug/info/warning/error).
        json_output: JSON lines when True, colored console output otherwise.
        service: Service name stamped on every record, e.g. ``webhook-receiver``.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if service:
        shared_processors.append(_service_tagger(service))

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        # ExtraAdder surfaces stdlib ``extra={...}`` fields such as trace_id
        foreign_pre_chain=shared_processors + [structlog.stdlib.ExtraAdder()],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Every forward and health probe would otherwise log twice
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def bind_request_context(trace_id: str, client_host: str | None = None) -> None:
    """Bind contextual variables to the current async context."""
    ctx = {"trace_id": trace_id}
    if client_host:
        ctx["client_host"] = client_host
    structlog.contextvars.bind_contextvars(**ctx)


def clear_request_context() -> None:
    """Clear bound context variables after a request."""
    structlog.contextvars.clear_contextvars()
