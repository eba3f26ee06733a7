"""Commonly used typing helpers."""

from __future__ import annotations

from typing import TypeAlias, TypeVar, Union

from .exceptions import Error

T = TypeVar("T")

# Result type: either a value of type ``T`` or an ``Error`` instance.
Result: TypeAlias = Union[T, Error]


def is_error(value: object) -> bool:
    """Return ``True`` when a stage result carries an error."""
    return isinstance(value, Error)


__all__ = ["Result", "Error", "is_error"]
