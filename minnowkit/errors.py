"""Exceptions raised by failed system operations and related checks."""

from __future__ import annotations

import os
from typing import Optional, TypeVar

T = TypeVar("T")


class TaggedError(Exception):
    """An error from a named attempt, carrying the numeric code it failed with."""

    def __init__(self, attempt: str, error_code: int, message: str) -> None:
        self.attempt = attempt
        self.error_code = error_code
        self.message = message
        super().__init__(f"{attempt}: {message}")


class UnixError(TaggedError):
    """A failed system call, described by its error number."""

    def __init__(self, attempt: str, errno_value: int) -> None:
        super().__init__(attempt, errno_value, os.strerror(errno_value))


def check_system_call(attempt: str, return_value: int) -> int:
    """Return a non-negative result unchanged; raise for a negative one.

    A negative result is a failure whose magnitude is the error number,
    in the style of raw kernel calls.
    """
    if return_value >= 0:
        return return_value
    raise UnixError(attempt, -return_value)


def notnull(context: str, value: Optional[T]) -> T:
    """Return ``value``, or raise if it is None."""
    if value is None:
        raise RuntimeError(f"{context}: returned null pointer")
    return value