"""Statement classification for raw SQL.

Uses the SQLGlot AST to decide what kind of statement a raw ``sql()`` call
runs. Statements SQLGlot cannot parse (vendor commands such as
``OPTIMIZE TABLE``) are reported as ``UNKNOWN``.
"""

from functools import lru_cache
from typing import Final, Optional

import sqlglot
from sqlglot import expressions as exp
from sqlglot.errors import ParseError, TokenError
from typing_extensions import Literal

from sqlfacade.utils.logging import get_logger

__all__ = ("OperationType", "detect_operation_type")

logger = get_logger("core.compiler")

OperationType = Literal["SELECT", "INSERT", "UPDATE", "DELETE", "DDL", "PRAGMA", "EXECUTE", "SCRIPT", "UNKNOWN"]

DETECTION_CACHE_SIZE: Final = 512


def _classify(expression: "Optional[exp.Expression]") -> "OperationType":
    if isinstance(expression, (exp.Select, exp.Union)):
        return "SELECT"
    if isinstance(expression, exp.Insert):
        return "INSERT"
    if isinstance(expression, exp.Update):
        return "UPDATE"
    if isinstance(expression, exp.Delete):
        return "DELETE"
    if isinstance(expression, (exp.Create, exp.Drop, exp.Alter)):
        return "DDL"
    if isinstance(expression, exp.Pragma):
        return "PRAGMA"
    if isinstance(expression, exp.Command):
        return "EXECUTE"
    return "UNKNOWN"


@lru_cache(maxsize=DETECTION_CACHE_SIZE)
def detect_operation_type(sql: str, dialect: "Optional[str]" = None) -> "OperationType":
    """AST-based operation type detection.

    Args:
        sql: Statement text.
        dialect: SQLGlot dialect name.

    Returns:
        Operation type string, ``SCRIPT`` for multiple statements.
    """
    try:
        expressions = [expression for expression in sqlglot.parse(sql, read=dialect) if expression is not None]
    except (ParseError, TokenError) as exc:
        logger.debug("Could not classify statement: %s", exc)
        return "UNKNOWN"
    if not expressions:
        return "UNKNOWN"
    if len(expressions) > 1:
        return "SCRIPT"
    return _classify(expressions[0])
