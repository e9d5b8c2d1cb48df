"""Unit tests for logging helpers."""

import datetime
import logging
from collections.abc import Generator

import pytest

from sqlfacade.utils.logging import (
    ROOT_LOGGER_NAME,
    ErrorContextFilter,
    StructuredFormatter,
    configure_logging,
    get_error_context,
    get_logger,
    log_with_context,
    set_error_context,
)
from sqlfacade.utils.serializers import from_json


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def error_context() -> Generator[str, None, None]:
    set_error_context("import")
    yield "import"
    set_error_context(None)


def _record(message: str = "hello") -> logging.LogRecord:
    return logging.LogRecord("sqlfacade.test", logging.INFO, __file__, 10, message, (), None)


def test_get_logger_namespaces_names() -> None:
    assert get_logger().name == "sqlfacade"
    assert get_logger("facade").name == "sqlfacade.facade"
    assert get_logger("sqlfacade.core.cache").name == "sqlfacade.core.cache"


def test_get_logger_adds_one_context_filter() -> None:
    logger = get_logger("test.filters")
    get_logger("test.filters")

    assert sum(isinstance(f, ErrorContextFilter) for f in logger.filters) == 1


def test_error_context_filter(error_context: str) -> None:
    assert get_error_context() == error_context

    record = _record()
    ErrorContextFilter().filter(record)

    assert record.error_context == error_context  # type: ignore[attr-defined]


def test_empty_context_clears() -> None:
    set_error_context("")

    assert get_error_context() is None


def test_structured_formatter_emits_facade_fields(error_context: str) -> None:
    record = _record("SELECT * FROM files WHERE payload = :payload")
    ErrorContextFilter().filter(record)
    record.extra_fields = {  # type: ignore[attr-defined]
        "operation": "select",
        "parameters": {"payload": b"abc", "day": datetime.date(2024, 1, 1), "id": 3},
        "code": 0,
    }

    payload = from_json(StructuredFormatter().format(record))

    assert payload["message"] == "SELECT * FROM files WHERE payload = :payload"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "sqlfacade.test"
    assert payload["context"] == error_context
    assert payload["operation"] == "select"
    assert payload["code"] == 0
    assert payload["parameters"] == {"payload": "b'abc'", "day": "datetime.date(2024, 1, 1)", "id": 3}


def test_structured_formatter_positional_parameters() -> None:
    record = _record()
    record.extra_fields = {"parameters": ("Ada", b"\x00")}  # type: ignore[attr-defined]

    payload = from_json(StructuredFormatter().format(record))

    assert payload["parameters"] == ["Ada", "b'\\x00'"]
    assert "context" not in payload


def test_log_with_context_attaches_fields(restore_root_logger: logging.Logger) -> None:
    handler = _ListHandler()
    configure_logging(level=logging.DEBUG, handler=handler)

    log_with_context(get_logger("test.context"), logging.INFO, "executed", operation="select", rows=3)

    assert len(handler.records) == 1
    assert handler.records[0].getMessage() == "executed"
    assert handler.records[0].extra_fields == {"operation": "select", "rows": 3}  # type: ignore[attr-defined]
    assert handler.records[0].funcName == "test_log_with_context_attaches_fields"


def test_log_with_context_respects_level(restore_root_logger: logging.Logger) -> None:
    handler = _ListHandler()
    configure_logging(level=logging.WARNING, handler=handler)

    log_with_context(get_logger("test.level"), logging.INFO, "ignored")

    assert handler.records == []


def test_configure_logging_replaces_only_its_own_handler(restore_root_logger: logging.Logger) -> None:
    application_handler = _ListHandler()
    restore_root_logger.addHandler(application_handler)

    configure_logging()
    installed = configure_logging()

    assert application_handler in restore_root_logger.handlers
    assert [h for h in restore_root_logger.handlers if h is not application_handler] == [installed]
    assert isinstance(installed.formatter, StructuredFormatter)
    assert restore_root_logger.level == logging.INFO
