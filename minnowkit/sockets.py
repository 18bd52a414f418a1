"""Network sockets built on reference-counted file descriptors."""

from __future__ import annotations

import socket
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator, List, Optional, Tuple, TypeVar, Union

from .address import Address
from .errors import UnixError
from .file_descriptor import READ_BUFFER_SIZE, FileDescriptor

R = TypeVar("R")

_BytesLike = (bytes, bytearray, memoryview)
Buffer = Union[bytes, bytearray, memoryview]

_SO_BINDTODEVICE = getattr(socket, "SO_BINDTODEVICE", 25)
_SO_DOMAIN = getattr(socket, "SO_DOMAIN", 39)
_SO_PROTOCOL = getattr(socket, "SO_PROTOCOL", 38)
_AF_PACKET = getattr(socket, "AF_PACKET", 17)


class Socket(FileDescriptor):
    """A network socket; usually used through one of its subclasses."""

    def __init__(self, domain: int, kind: int, protocol: int = 0) -> None:
        try:
            sock = socket.socket(domain, kind, protocol)
        except OSError as exc:
            raise UnixError("socket", exc.errno) from exc
        super().__init__(sock.detach())

    def _attach(self, fd: FileDescriptor, domain: int, kind: int, protocol: int = 0) -> None:
        """Take over an existing descriptor, checking that it is the expected kind of socket."""
        self._wrapper = fd._wrapper
        if self._getsockopt(socket.SOL_SOCKET, _SO_DOMAIN) != domain:
            raise RuntimeError("socket domain mismatch")
        if self._getsockopt(socket.SOL_SOCKET, socket.SO_TYPE) != kind:
            raise RuntimeError("socket type mismatch")
        if self._getsockopt(socket.SOL_SOCKET, _SO_PROTOCOL) != protocol:
            raise RuntimeError("socket protocol mismatch")

    @classmethod
    def _adopt(cls, fd: FileDescriptor, domain: int, kind: int, protocol: int = 0) -> "Socket":
        obj = cls.__new__(cls)
        Socket._attach(obj, fd, domain, kind, protocol)
        return obj

    @contextmanager
    def _borrowed(self) -> Iterator[socket.socket]:
        """A socket object over this descriptor that does not own it."""
        try:
            sock = socket.socket(fileno=self.fileno())
        except OSError as exc:
            raise UnixError("socket", exc.errno) from exc
        try:
            yield sock
        finally:
            sock.detach()

    @staticmethod
    def _syscall(what: str, func: Callable[..., R], *args: Any) -> R:
        try:
            return func(*args)
        except OSError as exc:
            raise UnixError(what, exc.errno) from exc

    def _getsockopt(self, level: int, option: int) -> int:
        with self._borrowed() as sock:
            return self._syscall("getsockopt", sock.getsockopt, level, option)

    def _setsockopt(self, level: int, option: int, value: Union[int, bytes]) -> None:
        with self._borrowed() as sock:
            self._syscall("setsockopt", sock.setsockopt, level, option, value)

    def _get_address(self, what: str, getter: Callable[[socket.socket], Any]) -> Address:
        with self._borrowed() as sock:
            family = sock.family
            raw = self._syscall(what, getter, sock)
        return Address.from_sockaddr(family, raw)

    def bind(self, address: Address) -> None:
        """Bind to a local address, usually before listening."""
        with self._borrowed() as sock:
            self._syscall("bind", sock.bind, address.sockaddr())

    def bind_to_device(self, device_name: str) -> None:
        """Restrict the socket to one network interface."""
        self._setsockopt(socket.SOL_SOCKET, _SO_BINDTODEVICE, device_name.encode())

    def connect(self, address: Address) -> None:
        """Connect to a peer; on a non-blocking socket this may still be in progress."""
        with self._borrowed() as sock:
            self._call("connect", sock.connect, address.sockaddr())

    def shutdown(self, how: int) -> None:
        """Shut down reading (SHUT_RD), writing (SHUT_WR) or both (SHUT_RDWR)."""
        with self._borrowed() as sock:
            self._syscall("shutdown", sock.shutdown, how)
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise RuntimeError("Socket.shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        return self._get_address("getsockname", lambda s: s.getsockname())

    def peer_address(self) -> Address:
        return self._get_address("getpeername", lambda s: s.getpeername())

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner, at some cost in robustness."""
        self._setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

    def raise_if_error(self) -> None:
        """Raise the socket's pending error, as seen on non-blocking sockets."""
        socket_error = self._getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        if socket_error:
            raise UnixError("socket error", socket_error)


class DatagramSocket(Socket):
    """A socket that sends and receives whole datagrams."""

    def recv(self, size: Optional[int] = None) -> Optional[Tuple[Address, bytes]]:
        """Receive one datagram (up to ``size`` bytes, 16384 if not given) and its sender.

        Returns None if a non-blocking socket had nothing to receive.
        """
        if not size:
            size = READ_BUFFER_SIZE
        buf = bytearray(size)
        with self._borrowed() as sock:
            family = sock.family
            result = self._call("recvfrom", sock.recvfrom_into, buf, size, socket.MSG_TRUNC)
        self._register_read()
        if result is None:
            return None
        length, source = result
        if length > size:
            raise RuntimeError(f"recvfrom (oversized datagram of length {length})")
        if source is None:
            raise RuntimeError("recvfrom gave invalid namelen")
        return Address.from_sockaddr(family, source), bytes(buf[:length])

    def recv_vectored(self, sizes: Iterable[int]) -> Optional[Tuple[Address, List[bytes]]]:
        """Receive one datagram into buffers of the given sizes (a final 0 means 16384).

        Returns the sender and what landed in each buffer, or None if a
        non-blocking socket had nothing to receive.
        """
        sizes = list(sizes)
        if not sizes:
            raise RuntimeError("DatagramSocket.recv_vectored called with no payload buffers")
        sizes = self._read_sizes(sizes)
        buffers = [bytearray(size) for size in sizes]
        total = sum(sizes)
        with self._borrowed() as sock:
            family = sock.family
            result = self._call("recvmsg", sock.recvmsg_into, buffers, 0, socket.MSG_TRUNC)
        self._register_read()
        if result is None:
            return None
        length, _, msg_flags, source = result
        if length > total:
            raise RuntimeError(f"recvmsg (oversized datagram of length {length})")
        if msg_flags & socket.MSG_TRUNC:
            raise RuntimeError("recvmsg (oversized datagram indicated only by MSG_TRUNC)")
        if source is None:
            raise RuntimeError("recvmsg gave invalid namelen")
        return Address.from_sockaddr(family, source), self._scatter(buffers, length)

    def send(
        self,
        payload: Union[Buffer, Iterable[Buffer]],
        destination: Optional[Address] = None,
    ) -> None:
        """Send one datagram, from a buffer or a list of buffers.

        Without a destination it goes to the connected peer.
        """
        with self._borrowed() as sock:
            if isinstance(payload, _BytesLike):
                size = len(payload)
                what = "sendto"
                if destination is None:
                    sent = self._call(what, sock.send, payload)
                else:
                    sent = self._call(what, sock.sendto, payload, destination.sockaddr())
            else:
                chunks, size = self._gather(payload)
                what = "sendmsg"
                if destination is None:
                    sent = self._call(what, sock.sendmsg, chunks)
                else:
                    sent = self._call(what, sock.sendmsg, chunks, [], 0, destination.sockaddr())
        self._register_write()
        if (sent or 0) != size:
            raise RuntimeError(f"{what} sent some length other than that of payload")


class UDPSocket(DatagramSocket):
    """An IPv4 UDP socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM)


class TCPSocket(Socket):
    """An IPv4 TCP socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM)

    def listen(self, backlog: int = 16) -> None:
        """Mark the socket as accepting incoming connections."""
        with self._borrowed() as sock:
            self._syscall("listen", sock.listen, backlog)

    def accept(self) -> "TCPSocket":
        """Wait for and return a new connection."""
        self._register_read()
        with self._borrowed() as sock:
            conn, _ = self._syscall("accept", sock.accept)
        fd = FileDescriptor(conn.detach())
        return TCPSocket._adopt(fd, socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)


class PacketSocket(DatagramSocket):
    """A link-layer packet socket."""

    def __init__(self, kind: int, protocol: int) -> None:
        super().__init__(_AF_PACKET, kind, protocol)


class RawSocket(DatagramSocket):
    """A raw IPv4 socket that sends whole IP datagrams."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_RAW, socket.IPPROTO_RAW)


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket made from an existing descriptor."""

    def __init__(self, fd: FileDescriptor) -> None:
        self._attach(fd, socket.AF_UNIX, socket.SOCK_STREAM)


class LocalDatagramSocket(DatagramSocket):
    """A Unix-domain datagram socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_DGRAM)