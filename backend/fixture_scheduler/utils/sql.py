"""
SQL utilities for consistent handling of query results.

SQLModel/SQLAlchemy may return COUNT/MAX results as int or as a 1-tuple/Row.
Use scalar_int() to safely coerce to int everywhere.
"""
from typing import Any


def scalar_int(x: Any, default: int = 0) -> int:
    """Convert COUNT/MAX result to int. Handles int, None or 1-tuple/Row."""
    if x is None:
        return default
    try:
        value = x[0]
    except (TypeError, IndexError, KeyError):
        value = x
    if value is None:
        return default
    return int(value)
