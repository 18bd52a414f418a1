"""Reference-counted handles to kernel file descriptors."""

from __future__ import annotations

import errno
import fcntl
import os
import sys
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar, Union

from .errors import UnixError

R = TypeVar("R")

_BytesLike = (bytes, bytearray, memoryview)
Buffer = Union[bytes, bytearray, memoryview]

READ_BUFFER_SIZE = 16384
_WOULD_BLOCK = (errno.EAGAIN, errno.EWOULDBLOCK, errno.EINPROGRESS)


class _FDWrapper:
    """The shared state behind every handle to one kernel file descriptor."""

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise RuntimeError(f"invalid fd number:{fd}")
        try:
            flags = fcntl.fcntl(fd, fcntl.F_GETFL)
        except OSError as exc:
            raise UnixError("fcntl", exc.errno) from exc
        self.fd = fd
        self.eof = False
        self.closed = False
        self.non_blocking = bool(flags & os.O_NONBLOCK)
        self.read_count = 0
        self.write_count = 0

    def close(self) -> None:
        if self.closed:
            raise UnixError("close", errno.EBADF)
        try:
            os.close(self.fd)
        except OSError as exc:
            raise UnixError("close", exc.errno) from exc
        self.eof = self.closed = True

    def __del__(self) -> None:
        if getattr(self, "closed", True):
            return
        try:
            self.close()
        except Exception as exc:  # never raise from a finaliser
            sys.stderr.write(f"Exception destructing FDWrapper: {exc}\n")


class FileDescriptor:
    """A handle to a file descriptor; the descriptor closes when no handle remains."""

    def __init__(self, fd: int) -> None:
        self._wrapper = _FDWrapper(fd)

    @classmethod
    def _from_wrapper(cls, wrapper: _FDWrapper) -> "FileDescriptor":
        obj = FileDescriptor.__new__(FileDescriptor)
        obj._wrapper = wrapper
        return obj

    # state

    def fileno(self) -> int:
        return self._wrapper.fd

    @property
    def eof(self) -> bool:
        return self._wrapper.eof

    @property
    def closed(self) -> bool:
        return self._wrapper.closed

    @property
    def blocking(self) -> bool:
        return not self._wrapper.non_blocking

    @property
    def read_count(self) -> int:
        return self._wrapper.read_count

    @property
    def write_count(self) -> int:
        return self._wrapper.write_count

    def _register_read(self) -> None:
        self._wrapper.read_count += 1

    def _register_write(self) -> None:
        self._wrapper.write_count += 1

    def _set_eof(self) -> None:
        self._wrapper.eof = True

    def _call(self, what: str, func: Callable[..., R], *args: Any) -> Optional[R]:
        """Run a system call; None means a non-blocking descriptor was not ready."""
        try:
            return func(*args)
        except OSError as exc:
            if self._wrapper.non_blocking and exc.errno in _WOULD_BLOCK:
                return None
            raise UnixError(what, exc.errno) from exc

    @staticmethod
    def _gather(buffers: Iterable[Buffer]) -> Tuple[List[bytes], int]:
        """Check a list of buffers for a vectored call and return it with its total size."""
        if isinstance(buffers, str):
            raise TypeError("buffers must be bytes, not str")
        chunks = []
        for buf in buffers:
            if not isinstance(buf, _BytesLike):
                raise TypeError(f"buffers must be bytes, not {type(buf).__name__}")
            chunks.append(bytes(buf))
        if not chunks:
            raise RuntimeError("to_iovecs called with empty buffer list")
        if any(not chunk for chunk in chunks):
            raise RuntimeError("to_iovecs called with empty buffer in buffer list")
        return chunks, sum(map(len, chunks))

    @staticmethod
    def _read_sizes(sizes: Sequence[int]) -> List[int]:
        sizes = list(sizes)
        if not sizes:
            raise RuntimeError("read_vectored called with no buffers")
        if sizes[-1] == 0:
            sizes[-1] = READ_BUFFER_SIZE
        if any(size <= 0 for size in sizes):
            raise RuntimeError("to_iovecs called with empty buffer in buffer list")
        return sizes

    @staticmethod
    def _scatter(buffers: Sequence[bytearray], count: int) -> List[bytes]:
        out = []
        remaining = count
        for buf in buffers:
            take = min(remaining, len(buf))
            out.append(bytes(buf[:take]))
            remaining -= take
        return out

    # I/O

    def read(self, size: Optional[int] = None) -> bytes:
        """Read up to ``size`` bytes (16384 if not given); b"" at EOF or when not ready."""
        if not size:
            size = READ_BUFFER_SIZE
        data = self._call("read", os.read, self.fileno(), size)
        if data is None:
            data = b""
        elif not data:
            self._set_eof()
        self._register_read()
        if len(data) > size:
            raise RuntimeError("read() read more than requested")
        return data

    def read_vectored(self, sizes: Sequence[int]) -> List[bytes]:
        """Read into buffers of the given sizes (a final 0 means 16384).

        Returns one bytes object per buffer, each holding what landed in it.
        """
        sizes = self._read_sizes(sizes)
        buffers = [bytearray(size) for size in sizes]
        count = self._call("readv", os.readv, self.fileno(), buffers)
        if count is None:
            count = 0
        elif count == 0:
            self._set_eof()
        self._register_read()
        if count > sum(sizes):
            raise RuntimeError("read() read more than requested")
        return self._scatter(buffers, count)

    def write(self, data: Union[Buffer, Iterable[Buffer]]) -> int:
        """Write a buffer, or a list of buffers at once; return how many bytes went out."""
        if isinstance(data, _BytesLike):
            written = self._call("write", os.write, self.fileno(), data)
            written = written or 0
            self._register_write()
            if written == 0 and len(data):
                raise RuntimeError("write returned 0 given non-empty input buffer")
            if written > len(data):
                raise RuntimeError("write wrote more than length of input buffer")
            return written

        chunks, total = self._gather(data)
        written = self._call("writev", os.writev, self.fileno(), chunks)
        written = written or 0
        self._register_write()
        if written == 0 and total != 0:
            raise RuntimeError("writev returned 0 given non-empty input buffer")
        if written > total:
            raise RuntimeError("writev wrote more than length of input buffer")
        return written

    def write_all(self, data: Buffer) -> None:
        """Write the whole buffer; the descriptor must be blocking."""
        if not self.blocking:
            raise RuntimeError("write_all requires a blocking file descriptor")
        view = memoryview(bytes(data))
        while len(view):
            view = view[self.write(view):]

    def close(self) -> None:
        """Close the descriptor for every handle that shares it."""
        self._wrapper.close()

    def set_blocking(self, blocking: bool) -> None:
        try:
            flags = fcntl.fcntl(self.fileno(), fcntl.F_GETFL)
        except OSError as exc:
            raise UnixError("fcntl", exc.errno) from exc
        if blocking:
            flags &= ~os.O_NONBLOCK
        else:
            flags |= os.O_NONBLOCK
        try:
            fcntl.fcntl(self.fileno(), fcntl.F_SETFL, flags)
        except OSError as exc:
            raise UnixError("fcntl", exc.errno) from exc
        self._wrapper.non_blocking = not blocking

    def duplicate(self) -> "FileDescriptor":
        """Return another handle to the same descriptor, sharing its state."""
        return self._from_wrapper(self._wrapper)

    def __enter__(self) -> "FileDescriptor":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if not self.closed:
            self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<{type(self).__name__} fd={self.fileno()} {state}>"