"""SQLite database configuration."""

from typing import TYPE_CHECKING, Any, ClassVar, Optional, TypedDict, Union

from typing_extensions import NotRequired

from sqlfacade.adapters.sqlite.driver import SqliteDriver
from sqlfacade.config import DatabaseConfig

if TYPE_CHECKING:
    from sqlfacade.core.cache import CacheConfig


class SqliteConnectionParams(TypedDict, total=False):
    """SQLite connection parameters."""

    database: NotRequired[str]
    timeout: NotRequired[float]
    detect_types: NotRequired[int]
    isolation_level: "NotRequired[Optional[str]]"
    check_same_thread: NotRequired[bool]
    cached_statements: NotRequired[int]
    uri: NotRequired[bool]


__all__ = ("SqliteConfig", "SqliteConnectionParams")


class SqliteConfig(DatabaseConfig[SqliteDriver]):
    """SQLite configuration.

    Args:
        connection_config: Keyword arguments for ``sqlite3.connect``. Defaults to an in-memory database.
        cache_config: Read cache settings.
        echo: Log every rendered statement at INFO level as JSON lines on stderr.
    """

    driver_type: "ClassVar[type[SqliteDriver]]" = SqliteDriver

    def __init__(
        self,
        *,
        connection_config: "Optional[Union[SqliteConnectionParams, dict[str, Any]]]" = None,
        cache_config: "Optional[CacheConfig]" = None,
        echo: bool = False,
    ) -> None:
        super().__init__(
            connection_config=dict(connection_config or {}), cache_config=cache_config, echo=echo
        )

    def create_driver(self) -> SqliteDriver:
        return self.driver_type(connection_config=self.connection_config)
