from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Optional, TypeVar

from sqlfacade.core.cache import CacheConfig

if TYPE_CHECKING:
    from sqlfacade.driver import SyncDriverAdapterBase

__all__ = ("DatabaseConfig", "DriverT")

DriverT = TypeVar("DriverT", bound="SyncDriverAdapterBase")


class DatabaseConfig(ABC, Generic[DriverT]):
    """Base configuration for a facade backed by one driver.

    Args:
        connection_config: Adapter specific connection parameters.
        cache_config: Read cache settings.
        echo: Log every rendered statement at INFO level as JSON lines on stderr.
    """

    __slots__ = ("cache_config", "connection_config", "echo")

    driver_type: "ClassVar[type[Any]]"

    def __init__(
        self,
        *,
        connection_config: "Optional[dict[str, Any]]" = None,
        cache_config: "Optional[CacheConfig]" = None,
        echo: bool = False,
    ) -> None:
        self.connection_config: dict[str, Any] = connection_config or {}
        self.cache_config = cache_config or CacheConfig()
        self.echo = echo

    @abstractmethod
    def create_driver(self) -> DriverT:
        """Create an unopened driver for this configuration."""

    def __repr__(self) -> str:
        parts = ", ".join([
            f"connection_config={self.connection_config!r}",
            f"cache_config={self.cache_config!r}",
            f"echo={self.echo!r}",
        ])
        return f"{type(self).__name__}({parts})"
