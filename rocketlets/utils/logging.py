"""Structured logging for the host and the rocketlets it loads."""

from __future__ import annotations

import logging
import re
import sys

import structlog

# Host credentials that can end up in message text or call arguments
_SECRET_PATTERN = re.compile(
    r"(x-auth-token|x-user-id|auth[_-]?token|api[_-]?key|secret|password)"
    r"[\"']?\s*[:=]\s*[\"']?[\w\-\.]+",
    re.IGNORECASE,
)

# Proxy lifecycle event -> phase of the call it reports
_PHASES = {
    "method_calling": "start",
    "method_called": "success",
    "rocketlet_call_timed_out": "timeout",
}


def _filter_sensitive(
    _logger: structlog.types.WrappedLogger,
    _method: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    for key, value in list(event_dict.items()):
        if isinstance(value, str) and _SECRET_PATTERN.search(value):
            event_dict[key] = _SECRET_PATTERN.sub(r"\1=***REDACTED***", value)
    return event_dict


def _tag_rocketlet(
    _logger: structlog.types.WrappedLogger,
    _method: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Attribute entries bound to a rocketlet and label proxy lifecycle events.

    An entry carrying ``rocketlet=<id>`` is logged under ``rocketlet:<id>``
    so output from different plugins can be told apart, and the proxy's
    call events gain a ``phase`` (start, success, timeout).
    """
    rocketlet_id = event_dict.get("rocketlet")
    if rocketlet_id is not None:
        event_dict["logger"] = f"rocketlet:{rocketlet_id}"

    phase = _PHASES.get(event_dict.get("event"))
    if phase is not None and "method" in event_dict:
        event_dict.setdefault("phase", phase)
    return event_dict


def _processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        _tag_rocketlet,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _filter_sensitive,
    ]


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Route structlog through one stderr handler, console or JSON."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
