"""Carrying TCP messages in IPv4 datagrams over a TUN device."""

from __future__ import annotations

from typing import Optional

from .file_descriptor import FileDescriptor
from .helpers import parse, serialize
from .ipv4 import IPv4Datagram, IPv4Header
from .tcp_message import TCPMessage
from .tcp_over_ip import TCPOverIPv4Adapter
from .tcp_segment import TCPSegment


class TCPOverIPv4OverTunFdAdapter(TCPOverIPv4Adapter):
    """Reads and writes TCP-in-IPv4 datagrams on a TUN device descriptor."""

    def __init__(self, tun: FileDescriptor) -> None:
        super().__init__()
        self._tun = tun

    def read(self) -> Optional[TCPMessage]:
        """Read one datagram; return its TCP message if it is valid and for us."""
        buffers = self._tun.read_vectored([IPv4Header.LENGTH, TCPSegment.HEADER_LENGTH, 0])
        dgram = parse(IPv4Datagram, buffers)
        if dgram is None:
            return None
        return self.unwrap_tcp_in_ip(dgram)

    def write(self, msg: TCPMessage) -> None:
        """Wrap a TCP message in an IPv4 datagram and write it to the device."""
        self._tun.write(serialize(self.wrap_tcp_in_ip(msg)))

    def fd(self) -> FileDescriptor:
        """The underlying device descriptor."""
        return self._tun