"""
Input validation for client requests.

Each validator returns the coerced value or raises the matching
ShiptivityError subclass.
"""
from typing import Any

from .errors import InvalidId, InvalidPriority, InvalidStatus
from .schema import Lane
from .store import ClientStore


SQLITE_INT_MIN = -2 ** 63
SQLITE_INT_MAX = 2 ** 63 - 1


def _as_int(value: Any) -> int:
    """
    Coerce ints, integral floats and numeric strings that fit a SQLite
    INTEGER. Raises ValueError.
    """
    if isinstance(value, bool):
        raise ValueError(f"boolean is not an integer: {value}")
    if isinstance(value, int):
        result = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"not an integral number: {value}")
        result = int(value)
    elif isinstance(value, str):
        result = int(value.strip(), 10)
    else:
        raise ValueError(f"unsupported type: {type(value).__name__}")
    if not SQLITE_INT_MIN <= result <= SQLITE_INT_MAX:
        raise ValueError(f"out of 64-bit range: {result}")
    return result


def parse_identifier(client_id: Any) -> int:
    try:
        return _as_int(client_id)
    except ValueError:
        raise InvalidId("Id can only be integer.")


def validate_identifier(client_id: Any, store: ClientStore) -> int:
    """Check that ``client_id`` is an integer naming a stored client."""
    value = parse_identifier(client_id)
    if store.get(value) is None:
        raise InvalidId("Cannot find client with that id.")
    return value


def validate_priority(priority: Any) -> int:
    """Check that ``priority`` is an integer. Sign is not checked."""
    try:
        return _as_int(priority)
    except ValueError:
        raise InvalidPriority()


def validate_status(status: Any) -> Lane:
    try:
        return Lane(status)
    except ValueError:
        raise InvalidStatus()
