"""The Internet checksum (ones' complement sum of 16-bit words)."""

from __future__ import annotations

from typing import Iterable, Union

_BytesLike = (bytes, bytearray, memoryview)
Data = Union[bytes, bytearray, memoryview, Iterable[Union[bytes, bytearray, memoryview]]]


class InternetChecksum:
    """Accumulates data and produces its Internet checksum.

    Data may be added in pieces of any length; byte parity carries over
    between pieces.
    """

    def __init__(self, initial: int = 0) -> None:
        self._sum = initial
        self._odd = False

    def add(self, data: Data) -> None:
        """Add a bytes-like object, or an iterable of them."""
        if isinstance(data, _BytesLike):
            self._add_bytes(memoryview(data).cast("B"))
            return
        if isinstance(data, str):
            raise TypeError("checksum data must be bytes, not str")
        for chunk in data:
            if not isinstance(chunk, _BytesLike):
                raise TypeError(f"checksum data must be bytes, not {type(chunk).__name__}")
            self._add_bytes(memoryview(chunk).cast("B"))

    def _add_bytes(self, view: memoryview) -> None:
        if not len(view):
            return
        if self._odd:
            self._sum += view[0]
            view = view[1:]
            self._odd = False
        even = len(view) - len(view) % 2
        self._sum += (sum(view[0:even:2]) << 8) + sum(view[1:even:2])
        if len(view) % 2:
            self._sum += view[-1] << 8
            self._odd = True

    def value(self) -> int:
        """Return the checksum of everything added so far."""
        total = self._sum
        while total > 0xFFFF:
            total = (total >> 16) + (total & 0xFFFF)
        return ~total & 0xFFFF