"""Driver protocol for sqlfacade."""

from sqlfacade.driver._sync import PreparedStatement, SyncDriverAdapterBase

__all__ = ("PreparedStatement", "SyncDriverAdapterBase")
