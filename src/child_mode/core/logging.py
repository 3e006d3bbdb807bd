"""
Structured logging configuration with namespace correlation.

Every record emitted by the configuration store, the session timer and the
override workflow carries the namespace (app identifier) it belongs to, so
several restriction setups sharing one process can be told apart in the logs.
"""

import logging
from typing import Any, List, Optional

import structlog


class StructuredLogger:
    """structlog wrapper that stamps its namespace on each event.

    The namespace is bound per logger so components of different namespaces
    living in one process never mislabel each other's records.
    """

    def __init__(self, name: str, namespace: Optional[str] = None):
        self.name = name
        self.namespace = namespace or None
        self.logger = structlog.get_logger(name)

    def _emit(self, level: str, message: str, **kwargs: Any) -> None:
        if self.namespace and "namespace" not in kwargs:
            kwargs["namespace"] = self.namespace
        getattr(self.logger, level)(message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._emit("debug", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._emit("info", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._emit("warning", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._emit("error", message, **kwargs)

    def log_config_change(self, field: str, **kwargs: Any) -> None:
        """Log a configuration field mutation."""
        self._emit("info", f"Configuration change: {field}", field=field, **kwargs)

    def log_timer_event(
        self, event: str, remaining_seconds: float, **kwargs: Any
    ) -> None:
        """Log a session timer transition."""
        self._emit(
            "info",
            f"Timer event: {event}",
            timer_event=event,
            remaining_seconds=remaining_seconds,
            **kwargs,
        )

    def log_override_event(self, action: str, **kwargs: Any) -> None:
        """Log privileged override activity. Never pass the passcode here."""
        self._emit("warning", f"Override event: {action}", action=action, **kwargs)


def get_logger(name: str, namespace: Optional[str] = None) -> StructuredLogger:
    return StructuredLogger(name, namespace=namespace)


def configure_logging(level: str = "WARNING", json_format: bool = False) -> None:
    """Route structlog and the standard library loggers to stderr at ``level``."""
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    renderer = (
        structlog.processors.JSONRenderer()
        if json_format
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        renderer,
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    # Modules using logging.getLogger(__name__) share the same threshold
    logging.basicConfig(level=numeric_level, format="%(levelname)s %(name)s: %(message)s")
