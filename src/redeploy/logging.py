"""structlog setup: console lines in dev, JSON in prod, credentials redacted."""

import logging
import sys
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from typing import Any

import structlog

_SECRET_KEYS = frozenset({"token", "authorization", "github_token", "webhook_token"})


def _redact_secrets(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    for key in _SECRET_KEYS & event_dict.keys():
        value = event_dict[key]
        if isinstance(value, str) and value:
            event_dict[key] = f"{value[:4]}***"
    return event_dict


def configure_logging(
    level: str,
    *,
    app_env: str = "dev",
    json_output: bool | None = None,
) -> None:
    """Route stdlib and structlog records through one stderr handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        app_env: ``prod`` selects JSON output unless ``json_output`` says otherwise.
        json_output: Force JSON (True) or console (False) rendering.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    as_json = app_env == "prod" if json_output is None else json_output

    shared: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _redact_secrets,
    ]
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if as_json else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)
    # httpx logs every request line at INFO.
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))


@contextmanager
def log_context(**fields: object) -> Iterator[None]:
    """Attach ``fields`` to every record logged inside the block."""
    structlog.contextvars.bind_contextvars(**fields)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*fields)
