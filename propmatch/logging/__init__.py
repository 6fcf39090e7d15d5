"""Structured logging for match runs and persistence events."""

import logging
from typing import Optional, Union

from .config import configure_logging
from .context import clear_log_context, get_log_context, log_context


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that adds a fixed component field to every record.

    Fields passed through ``extra`` on the individual call win over the
    adapter's own fields.
    """

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(
    name: str, component: Optional[str] = None
) -> Union[logging.Logger, ComponentLoggerAdapter]:
    """Get a logger, optionally tagged with a component.

    Args:
        name: Logger name (typically __name__)
        component: Optional component identifier (matching, persistence, cli)

    Returns:
        Logger, or ComponentLoggerAdapter when a component is given

    Example:
        >>> logger = get_logger(__name__, component="matching")
        >>> logger.info("Match run started", extra={"event": "match.run.started"})
    """
    logger = logging.getLogger(name)
    if component:
        return ComponentLoggerAdapter(logger, {"component": component})
    return logger


__all__ = [
    "ComponentLoggerAdapter",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "get_logger",
    "log_context",
]
