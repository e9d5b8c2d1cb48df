"""Logging helpers for sqlfacade.

Every module logs through :func:`get_logger`, which places the logger under
the ``sqlfacade`` namespace and tags records with the ambient error context
set through :meth:`sqlfacade.diagnostics.ErrorLog.set_context`.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from sqlfacade._serialization import encode_json

if TYPE_CHECKING:
    from logging import LogRecord

__all__ = (
    "ErrorContextFilter",
    "StructuredFormatter",
    "configure_logging",
    "error_context_var",
    "get_error_context",
    "get_logger",
    "log_with_context",
    "set_error_context",
)

ROOT_LOGGER_NAME = "sqlfacade"

_SCALAR_TYPES = (str, int, float, bool, type(None))

error_context_var: ContextVar[str | None] = ContextVar("sqlfacade_error_context", default=None)


def set_error_context(context: str | None) -> None:
    """Set the error context attached to records logged in this context."""
    error_context_var.set(context or None)


def get_error_context() -> str | None:
    return error_context_var.get()


def _describe_parameters(parameters: Any) -> Any:
    if isinstance(parameters, dict):
        return {name: _describe_value(value) for name, value in parameters.items()}
    if isinstance(parameters, (list, tuple)):
        return [_describe_value(value) for value in parameters]
    return _describe_value(parameters)


def _describe_value(value: Any) -> Any:
    return value if isinstance(value, _SCALAR_TYPES) else repr(value)


class StructuredFormatter(logging.Formatter):
    """Render records as one JSON object per line.

    Fields passed to :func:`log_with_context` (``operation``, ``parameters``,
    ``code`` and so on) become top level keys. Bound values that JSON cannot
    represent faithfully, such as bytes or dates, are written as their repr.
    """

    def format(self, record: LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = getattr(record, "error_context", None)
        if context:
            payload["context"] = context

        fields = dict(getattr(record, "extra_fields", None) or {})
        if "parameters" in fields:
            fields["parameters"] = _describe_parameters(fields["parameters"])
        payload.update(fields)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return str(encode_json(payload))


class ErrorContextFilter(logging.Filter):
    """Copy the ambient error context onto each record."""

    def filter(self, record: LogRecord) -> bool:
        if context := get_error_context():
            record.error_context = context  # type: ignore[attr-defined]
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the ``sqlfacade`` namespace.

    Args:
        name: Dotted suffix, or a full ``sqlfacade.*`` name. None returns the
            namespace root.
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)

    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    logger = logging.getLogger(name)
    if not any(isinstance(f, ErrorContextFilter) for f in logger.filters):
        logger.addFilter(ErrorContextFilter())
    return logger


def configure_logging(level: int = logging.INFO, handler: logging.Handler | None = None) -> logging.Handler:
    """Send ``sqlfacade`` records to ``handler`` as JSON lines.

    A handler installed by an earlier call is replaced; handlers the
    application attached itself are left alone.

    Args:
        level: Minimum level for the namespace.
        handler: Destination. Defaults to a stderr stream handler.

    Returns:
        The installed handler.
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for existing in [h for h in root_logger.handlers if getattr(h, "sqlfacade_managed", False)]:
        root_logger.removeHandler(existing)

    installed = handler or logging.StreamHandler()
    installed.setFormatter(StructuredFormatter())
    installed.sqlfacade_managed = True  # type: ignore[attr-defined]
    root_logger.addHandler(installed)
    root_logger.setLevel(level)
    return installed


def log_with_context(logger: logging.Logger, level: int, message: str, **extra_fields: Any) -> None:
    """Log ``message`` with structured fields for :class:`StructuredFormatter`."""
    if logger.isEnabledFor(level):
        logger.log(level, message, extra={"extra_fields": extra_fields}, stacklevel=2)
