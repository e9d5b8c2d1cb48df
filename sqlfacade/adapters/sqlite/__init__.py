from sqlfacade.adapters.sqlite.config import SqliteConfig, SqliteConnectionParams
from sqlfacade.adapters.sqlite.driver import SqliteCursor, SqliteDriver

__all__ = ("SqliteConfig", "SqliteConnectionParams", "SqliteCursor", "SqliteDriver")
