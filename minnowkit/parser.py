"""Big-endian parsing from, and serialisation to, lists of byte buffers."""

from __future__ import annotations

from collections import deque
from typing import Iterable, List, Union

_BytesLike = (bytes, bytearray, memoryview)
Buffer = Union[bytes, bytearray, memoryview]


def _as_buffers(buffers: Union[Buffer, Iterable[Buffer]]) -> List[bytes]:
    if isinstance(buffers, _BytesLike):
        buffers = [buffers]
    elif isinstance(buffers, str):
        raise TypeError("parser input must be bytes, not str")
    result = []
    for buf in buffers:
        if not isinstance(buf, _BytesLike):
            raise TypeError(f"parser input must be bytes, not {type(buf).__name__}")
        chunk = bytes(buf)
        if chunk:
            result.append(chunk)
    return result


class Parser:
    """Reads big-endian fields from a sequence of buffers.

    A read past the end sets the error flag; once it is set, reads return
    zeros and consume nothing.
    """

    def __init__(self, buffers: Union[Buffer, Iterable[Buffer]]) -> None:
        self._buffers = deque(_as_buffers(buffers))
        self._skip = 0
        self._size = sum(map(len, self._buffers))
        self._error = False

    def has_error(self) -> bool:
        return self._error

    def set_error(self) -> None:
        self._error = True

    def _check_size(self, size: int) -> None:
        if size > self._size:
            self._error = True

    def remove_prefix(self, n: int) -> None:
        """Discard up to ``n`` bytes from the front."""
        if n < 0:
            raise ValueError("cannot remove a negative number of bytes")
        while n and self._buffers:
            front = self._buffers[0]
            step = min(n, len(front) - self._skip)
            self._skip += step
            self._size -= step
            n -= step
            if self._skip == len(front):
                self._buffers.popleft()
                self._skip = 0

    def truncate(self, length: int) -> None:
        """Keep only the first ``length`` remaining bytes."""
        if self._size <= length:
            return
        if length <= 0:
            self._buffers.clear()
            self._skip = 0
            self._size = 0
            return
        kept: deque = deque()
        total = 0
        for position, buf in enumerate(self._buffers):
            start = self._skip if position == 0 else 0
            available = len(buf) - start
            if total + available < length:
                kept.append(buf)
                total += available
                continue
            kept.append(buf[: start + length - total])
            break
        self._buffers = kept
        self._size = length

    def all_remaining(self) -> List[bytes]:
        """Take every remaining buffer, leaving the parser empty."""
        out = list(self._buffers)
        if out and self._skip:
            out[0] = out[0][self._skip :]
        self._buffers.clear()
        self._skip = 0
        self._size = 0
        return out

    def buffer(self) -> List[bytes]:
        """Return the remaining buffers without consuming them."""
        out = list(self._buffers)
        if out and self._skip:
            out[0] = out[0][self._skip :]
        return out

    def _take(self, size: int) -> bytes:
        parts = []
        while size:
            front = self._buffers[0]
            piece = front[self._skip : self._skip + size]
            parts.append(piece)
            size -= len(piece)
            self.remove_prefix(len(piece))
        return b"".join(parts)

    def read_bytes(self, size: int) -> bytes:
        """Read exactly ``size`` bytes, or zeros if that is not possible."""
        self._check_size(size)
        if self._error:
            return bytes(size)
        return self._take(size)

    def concatenate_all_remaining(self) -> bytes:
        """Take every remaining byte as one bytes object."""
        return b"".join(self.all_remaining())

    def integer(self, size: int) -> int:
        """Read an unsigned big-endian integer of ``size`` bytes."""
        if size < 1:
            raise ValueError("integer size must be at least one byte")
        self._check_size(size)
        if self._error:
            return 0
        return int.from_bytes(self._take(size), "big")


class Serializer:
    """Builds a list of buffers from big-endian integers and byte strings."""

    def __init__(self) -> None:
        self._output: List[bytes] = []
        self._pending = bytearray()

    def _flush(self) -> None:
        if self._pending:
            self._output.append(bytes(self._pending))
            self._pending.clear()

    def integer(self, value: int, size: int) -> None:
        """Append ``value`` as an unsigned big-endian integer of ``size`` bytes."""
        if size < 1:
            raise ValueError("integer size must be at least one byte")
        mask = (1 << (8 * size)) - 1
        self._pending += (value & mask).to_bytes(size, "big")

    def buffer(self, data: Union[Buffer, Iterable[Buffer]]) -> None:
        """Append a buffer, or each of an iterable of buffers; empty ones are skipped."""
        if isinstance(data, _BytesLike):
            if len(data):
                self._flush()
                self._output.append(bytes(data))
            return
        if isinstance(data, str):
            raise TypeError("serializer data must be bytes, not str")
        for chunk in data:
            if not isinstance(chunk, _BytesLike):
                raise TypeError(f"serializer data must be bytes, not {type(chunk).__name__}")
            self.buffer(chunk)

    def finish(self) -> List[bytes]:
        """Return the buffers built so far and start afresh."""
        self._flush()
        output, self._output = self._output, []
        return output