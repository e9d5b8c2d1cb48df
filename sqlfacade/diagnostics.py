"""Append-only log of non-fatal errors.

Facade operations do not raise on driver failures. Each failure is appended
here as an ``ErrorEntry`` and can be inspected after the fact, filtered by
component, operation, context and error code.
"""

import logging
from collections.abc import Iterator, Mapping
from typing import Any, NamedTuple, Optional, Union

from sqlfacade.utils.logging import get_logger, log_with_context, set_error_context

__all__ = ("ErrorEntry", "ErrorLog", "render_message")

logger = get_logger("diagnostics")


class ErrorEntry(NamedTuple):
    """One recorded error."""

    component: Optional[str]
    operation: Optional[str]
    message: str
    code: "Union[int, str]"
    context: str


class _SafeFormatMap(dict):  # type: ignore[type-arg]
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def render_message(message: str, variables: "Optional[Mapping[str, Any]]" = None) -> str:
    """Substitute ``{name}`` placeholders in ``message``.

    Unknown placeholders are left untouched.
    """
    if not variables:
        return message
    return message.format_map(_SafeFormatMap(variables))


class ErrorLog:
    """Ordered, append-only error list with an ambient context.

    Entries are never modified or pruned; call :meth:`clear` explicitly when
    they are no longer needed.
    """

    __slots__ = ("_context", "_entries")

    def __init__(self) -> None:
        self._entries: list[ErrorEntry] = []
        self._context = ""

    @property
    def context(self) -> str:
        return self._context

    def set_context(self, context: str) -> None:
        """Set the context used for every entry added until :meth:`clear_context`.

        Log records emitted in the current thread or task carry it as well.
        """
        self._context = context
        set_error_context(context)

    def clear_context(self) -> None:
        self._context = ""
        set_error_context(None)

    def add(
        self,
        message: str,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        *,
        variables: "Optional[Mapping[str, Any]]" = None,
        context: Optional[str] = None,
        code: "Union[int, str]" = 0,
    ) -> ErrorEntry:
        """Append an error.

        Args:
            message: Message text, optionally with ``{name}`` placeholders.
            component: Component that reported the error.
            operation: Operation that failed.
            variables: Values for the message placeholders.
            context: Overrides the ambient context for this entry.
            code: Error code.

        Returns:
            The appended entry.
        """
        entry = ErrorEntry(
            component=component,
            operation=operation,
            message=render_message(message, variables),
            code=code,
            context=context or self._context,
        )
        self._entries.append(entry)
        log_with_context(
            logger,
            logging.DEBUG,
            "Recorded error",
            component=component,
            operation=operation,
            error=entry.message,
            code=code,
            context=entry.context,
        )
        return entry

    def query(
        self,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[str] = None,
        code: "Optional[Union[int, str]]" = None,
    ) -> "list[ErrorEntry]":
        """Return the entries matching every given filter, in insertion order.

        Filters apply in sequence: component, operation, context, code. A
        filter left as None (or empty) matches everything.
        """
        errors = list(self._entries)
        if component:
            errors = [entry for entry in errors if entry.component == component]
        if operation:
            errors = [entry for entry in errors if entry.operation == operation]
        if context:
            errors = [entry for entry in errors if entry.context == context]
        if code:
            errors = [entry for entry in errors if entry.code == code]
        return errors

    def has_error(
        self,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[str] = None,
        code: "Optional[Union[int, str]]" = None,
    ) -> bool:
        return len(self.query(component, operation, context, code)) > 0

    def first_message(
        self,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[str] = None,
        code: "Optional[Union[int, str]]" = None,
    ) -> Optional[str]:
        """Return the message of the first matching entry, or None."""
        errors = self.query(component, operation, context, code)
        return errors[0].message if errors else None

    def clear(self) -> None:
        self._entries.clear()

    def dump(self, level: int = logging.INFO) -> None:
        """Write every entry to the diagnostics logger."""
        for entry in self._entries:
            logger.log(
                level,
                "[%s.%s] %s (code=%s, context=%s)",
                entry.component,
                entry.operation,
                entry.message,
                entry.code,
                entry.context,
            )

    def __iter__(self) -> "Iterator[ErrorEntry]":
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"ErrorLog(entries={len(self._entries)}, context={self._context!r})"
