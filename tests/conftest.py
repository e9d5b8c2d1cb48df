from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from sqlfacade import CacheConfig, DataAccessFacade, MemoryCacheBackend, SqliteConfig
from sqlfacade.adapters.sqlite import SqliteDriver

here = Path(__file__).parent
root_path = here.parent

USERS_DDL = (
    "CREATE TABLE users ("
    "id INTEGER PRIMARY KEY, "
    "first_name TEXT NOT NULL, "
    "last_name TEXT NOT NULL, "
    "email TEXT UNIQUE, "
    "age INTEGER)"
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


class CountingSqliteDriver(SqliteDriver):
    """SQLite driver that records every statement it executes."""

    __slots__ = ("executed",)

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.executed: list[str] = []

    def execute(self, statement: Any, parameters: Any = None) -> Any:
        self.executed.append(statement.sql)
        return super().execute(statement, parameters)


class CountingSqliteConfig(SqliteConfig):
    driver_type = CountingSqliteDriver


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_cache(clock: FakeClock) -> MemoryCacheBackend:
    return MemoryCacheBackend(max_size=100, clock=clock)


@pytest.fixture
def facade(memory_cache: MemoryCacheBackend) -> Generator[DataAccessFacade[Any], None, None]:
    """Initialized facade on an in-memory database with a ``users`` table."""
    db = DataAccessFacade(CountingSqliteConfig(cache_config=CacheConfig()), cache_backend=memory_cache)
    assert db.initialize()
    db.sql(USERS_DDL)
    yield db
    db.close()


@pytest.fixture
def executed(facade: DataAccessFacade[Any]) -> list[str]:
    """Statements the facade's driver has run."""
    driver = facade.driver
    assert isinstance(driver, CountingSqliteDriver)
    return driver.executed


@pytest.fixture
def restore_root_logger() -> Generator[logging.Logger, None, None]:
    """Undo handler and level changes made to the ``sqlfacade`` logger."""
    root = logging.getLogger("sqlfacade")
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
