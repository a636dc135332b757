"""
Logging configuration.

Application modules emit key-value events through structlog; every event
carries the service name and environment. Events are routed through the
stdlib root logger so uvicorn and SQLAlchemy output share one stream.
"""

import logging
import sys
from typing import Any, Callable, Dict, List

import structlog

from app.config import LogFormat, Settings

RENDERERS: Dict[LogFormat, Callable[[], Any]] = {
    LogFormat.JSON: lambda: structlog.processors.JSONRenderer(sort_keys=True),
    LogFormat.CONSOLE: lambda: structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
}


def add_static_fields(**fields: Any) -> Callable[..., Dict[str, Any]]:
    """Processor that stamps every event with fixed key-value pairs."""
    def processor(logger, method_name, event_dict):
        for key, value in fields.items():
            event_dict.setdefault(key, value)
        return event_dict
    return processor


def build_processors(settings: Settings) -> List[Any]:
    """Processor chain ending in the renderer for the configured log format."""
    return [
        add_static_fields(service=settings.app_name, env=settings.app_env.value),
        structlog.stdlib.filter_by_level,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
        RENDERERS[settings.log_format](),
    ]


def setup_logging(settings: Settings) -> None:
    """Configure structlog and the stdlib root logger."""
    structlog.configure(
        processors=build_processors(settings),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Rendering happens in structlog, the handler only writes the line
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=settings.log_level.value)
    logging.getLogger().setLevel(settings.log_level.value)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for a module."""
    return structlog.get_logger(name)
