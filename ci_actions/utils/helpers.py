"""Small helpers shared across actions."""

from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import structlog

log = structlog.get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def short_circuit(items: Sequence[T], predicate: Callable[[T, int, Sequence[T]], R | None]) -> R | None:
    """Return the first truthy result of ``predicate`` over ``items``.

    The predicate receives ``(value, index, items)``; iteration stops at the
    first truthy result.
    """
    for index, value in enumerate(items):
        result = predicate(value, index, items)
        if result:
            return result
    return None


def is_object(value: Any) -> bool:
    """True for plain dicts only (not subclasses, lists or scalars)."""
    return type(value) is dict


def format_row(key: str, value: str) -> str:
    return f"{key:<15}: {value}"


def table(key: str, value: str) -> None:
    """Log an aligned ``key: value`` diagnostic row."""
    log.info(format_row(key, value))
