"""Carrying TCP messages inside IPv4 datagrams."""

from __future__ import annotations

import ipaddress
from typing import Optional

from .address import Address
from .helpers import parse, serialize
from .ipv4 import IPv4Datagram, IPv4Header
from .tcp_config import FdAdapterBase
from .tcp_message import TCPMessage, UserDatagramInfo
from .tcp_segment import TCPSegment


def _dotted(address: int) -> str:
    return str(ipaddress.IPv4Address(address & 0xFFFFFFFF))


class TCPOverIPv4Adapter(FdAdapterBase):
    """Converts between TCP messages and the IPv4 datagrams that carry them."""

    def unwrap_tcp_in_ip(self, ip_dgram: IPv4Datagram) -> Optional[TCPMessage]:
        """Return the TCP message in a datagram, or None if it is invalid or unrelated.

        While listening, a SYN (without RST) fixes the peer's address and port
        and ends listening.
        """
        header = ip_dgram.header
        if not self.listening and header.dst != self.config.source.ipv4_numeric():
            return None
        if not self.listening and header.src != self.config.destination.ipv4_numeric():
            return None
        if header.proto != IPv4Header.PROTO_TCP:
            return None

        segment = parse(TCPSegment, list(ip_dgram.payload), header.pseudo_checksum())
        if segment is None:
            return None
        if segment.udinfo.dst_port != self.config.source.port():
            return None

        if self.listening:
            sender = segment.message.sender
            if not sender.syn or sender.rst:
                return None
            self.config.source = Address(_dotted(header.dst), self.config.source.port())
            self.config.destination = Address(_dotted(header.src), segment.udinfo.src_port)
            self.set_listening(False)

        if segment.udinfo.src_port != self.config.destination.port():
            return None
        return segment.message

    def wrap_tcp_in_ip(self, msg: TCPMessage) -> IPv4Datagram:
        """Build an IPv4 datagram carrying ``msg`` between the configured endpoints."""
        segment = TCPSegment(
            message=msg,
            udinfo=UserDatagramInfo(
                src_port=self.config.source.port(),
                dst_port=self.config.destination.port(),
            ),
        )
        dgram = IPv4Datagram()
        dgram.header.src = self.config.source.ipv4_numeric()
        dgram.header.dst = self.config.destination.ipv4_numeric()
        dgram.header.len = (
            dgram.header.hlen * 4 + TCPSegment.HEADER_LENGTH + len(msg.sender.payload)
        )
        segment.compute_checksum(dgram.header.pseudo_checksum())
        dgram.header.compute_checksum()
        dgram.payload = serialize(segment)
        return dgram