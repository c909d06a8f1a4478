"""Helpers at the boundary between caller values and the evaluation engine."""
from collections.abc import Mapping, Sequence
from functools import cmp_to_key
from typing import Any, Callable, List
import logging

logger = logging.getLogger(__name__)


def require_callable(value: Any, name: str = "argument") -> Callable:
    """Return value unchanged if it is callable, otherwise raise TypeError.

    Args:
        value: The object supplied by the caller.
        name: Name used in the error message.

    Raises:
        TypeError: If value is None or not callable.
    """
    if value is None:
        raise TypeError(f"{name} must not be None")
    if not callable(value):
        raise TypeError(f"{name} must be callable, got {type(value).__name__}")
    return value


def is_sequence(value: Any) -> bool:
    """True for finite, ordered, indexable containers.

    Strings and bytes are sequences to Python but are rejected here; a pipeline
    over the characters of a string is almost always a caller mistake.
    """
    if isinstance(value, (str, bytes, bytearray, memoryview, Mapping)):
        return False
    return isinstance(value, Sequence)


def to_sequence(value: Any, name: str = "source") -> List[Any]:
    """Copy a caller-supplied sequence into a new list.

    Raises:
        TypeError: If value is None or not a sequence (see is_sequence).
    """
    if value is None:
        raise TypeError(f"{name} must not be None")
    if not is_sequence(value):
        raise TypeError(f"{name} must be a list, tuple or other sequence, got {type(value).__name__}")
    return list(value)


def require_appendable(value: Any, name: str = "target") -> Any:
    """Check that a collection target can be appended to."""
    if value is None:
        raise TypeError(f"{name} must not be None")
    if not callable(getattr(value, "append", None)):
        raise TypeError(f"{name} must support append(), got {type(value).__name__}")
    return value


def require_count(value: Any, name: str = "n") -> int:
    """Validate a skip/limit count. bool is rejected even though it is an int."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    return value


def precedes_to_key(precedes: Callable[[Any, Any], bool]):
    """Turn a "strictly precedes" predicate into a sort key.

    Elements where neither precedes the other compare equal, so a stable sort
    keeps their original relative order.
    """
    def compare(a, b):
        if precedes(a, b):
            return -1
        if precedes(b, a):
            return 1
        return 0
    return cmp_to_key(compare)
