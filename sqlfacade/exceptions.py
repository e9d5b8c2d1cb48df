from typing import Any, Optional

__all__ = (
    "CacheUnavailableError",
    "DatabaseConnectionError",
    "DriverError",
    "ForeignKeyViolationError",
    "ImproperConfigurationError",
    "IntegrityError",
    "MalformedRequestError",
    "MissingDependencyError",
    "MissingParameterError",
    "NotNullViolationError",
    "OperationalError",
    "ParameterCollisionError",
    "SQLFacadeError",
    "SQLParsingError",
    "SerializationError",
    "TransactionError",
    "UniqueViolationError",
)


class SQLFacadeError(Exception):
    """Base exception class from which all sqlfacade exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``SQLFacadeError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class MissingDependencyError(SQLFacadeError, ImportError):
    """Missing optional dependency.

    This exception is raised only when a module depends on a dependency that has not been installed.
    """

    def __init__(self, package: str, install_package: Optional[str] = None) -> None:
        super().__init__(
            f"Package {package!r} is not installed but required. You can install it by running "
            f"'pip install sqlfacade[{install_package or package}]' to install sqlfacade with the required extra "
            f"or 'pip install {install_package or package}' to install the package separately",
        )


class ImproperConfigurationError(SQLFacadeError):
    """Raised when the facade is used before it is configured or initialized."""


class SerializationError(SQLFacadeError):
    """Encoding or decoding of an object failed."""


# -- Driver errors --
class DriverError(SQLFacadeError):
    """Connection, prepare or execute failure reported by the relational driver.

    Args:
        code: Driver specific error code, ``0`` when unknown.
    """

    code: "int | str"

    def __init__(self, *args: Any, detail: str = "", code: "int | str" = 0) -> None:
        super().__init__(*args, detail=detail)
        self.code = code


class DatabaseConnectionError(DriverError):
    """The database could not be opened or the connection was lost."""


class SQLParsingError(DriverError):
    """The driver rejected the statement text."""


class OperationalError(DriverError):
    """Database operational error (I/O, locking, interruption)."""


class TransactionError(DriverError):
    """Begin, commit or rollback failed."""


class IntegrityError(DriverError):
    """Data integrity constraint was violated."""


class UniqueViolationError(IntegrityError):
    """A unique or primary key constraint was violated."""


class NotNullViolationError(IntegrityError):
    """A NOT NULL constraint was violated."""


class ForeignKeyViolationError(IntegrityError):
    """A foreign key constraint was violated."""


# -- Cache errors --
class CacheUnavailableError(SQLFacadeError):
    """The cache backend could not be reached.

    Never surfaces to facade callers; reads fall back to the driver.
    """


# -- Request errors --
class MalformedRequestError(SQLFacadeError):
    """The request cannot be rendered into a complete statement."""

    sql: Optional[str]

    def __init__(self, message: str, sql: Optional[str] = None) -> None:
        """Initialize with optional SQL context."""
        detail_message = message
        if sql:
            detail_message = f"{message}\nSQL: {sql}"
        super().__init__(detail=detail_message)
        self.sql = sql


class MissingParameterError(MalformedRequestError):
    """Raised when a placeholder would have no bound value."""


class ParameterCollisionError(MalformedRequestError):
    """Raised when two columns map to the same bind parameter name."""
