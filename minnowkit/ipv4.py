"""IPv4 headers (without options support on output) and datagrams."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from typing import ClassVar, List

from .checksum import InternetChecksum
from .parser import Parser, Serializer


def _dotted(address: int) -> str:
    return str(ipaddress.IPv4Address(address & 0xFFFFFFFF))


@dataclass
class IPv4Header:
    """The fixed 20-byte IPv4 header."""

    LENGTH: ClassVar[int] = 20
    DEFAULT_TTL: ClassVar[int] = 128
    PROTO_TCP: ClassVar[int] = 6

    ver: int = 4
    hlen: int = 5
    tos: int = 0
    len: int = 0
    id: int = 0
    df: bool = True
    mf: bool = False
    offset: int = 0
    ttl: int = 128
    proto: int = 6
    cksum: int = 0
    src: int = 0
    dst: int = 0

    def payload_length(self) -> int:
        """Total length less the header length."""
        return (self.len - 4 * self.hlen) & 0xFFFF

    def pseudo_checksum(self) -> int:
        """The pseudo-header's contribution to an encapsulated TCP checksum."""
        total = (self.src >> 16) + (self.src & 0xFFFF)
        total += (self.dst >> 16) + (self.dst & 0xFFFF)
        total += self.proto
        total += self.payload_length()
        return total & 0xFFFFFFFF

    def compute_checksum(self) -> None:
        """Set ``cksum`` to the correct value for the other fields."""
        self.cksum = 0
        serializer = Serializer()
        self.serialize(serializer)
        check = InternetChecksum()
        check.add(serializer.finish())
        self.cksum = check.value()

    @classmethod
    def parse(cls, parser: Parser) -> "IPv4Header":
        """Read a header, flagging a parser error on a bad version, length or checksum."""
        first_byte = parser.integer(1)
        header = cls(ver=first_byte >> 4, hlen=first_byte & 0x0F)
        header.tos = parser.integer(1)
        header.len = parser.integer(2)
        header.id = parser.integer(2)
        fo_val = parser.integer(2)
        header.df = bool(fo_val & 0x4000)
        header.mf = bool(fo_val & 0x2000)
        header.offset = fo_val & 0x1FFF
        header.ttl = parser.integer(1)
        header.proto = parser.integer(1)
        header.cksum = parser.integer(2)
        header.src = parser.integer(4)
        header.dst = parser.integer(4)

        if header.ver != 4 or header.hlen < 5:
            parser.set_error()
        if parser.has_error():
            return header

        parser.remove_prefix(header.hlen * 4 - cls.LENGTH)

        given = header.cksum
        header.compute_checksum()
        if header.cksum != given:
            parser.set_error()
        return header

    def serialize(self, serializer: Serializer) -> None:
        """Write the header as it stands; the checksum is not recomputed."""
        if self.ver != 4:
            raise RuntimeError("wrong IP version")
        serializer.integer(((self.ver << 4) | (self.hlen & 0xF)) & 0xFF, 1)
        serializer.integer(self.tos, 1)
        serializer.integer(self.len, 2)
        serializer.integer(self.id, 2)
        fo_val = (0x4000 if self.df else 0) | (0x2000 if self.mf else 0) | (self.offset & 0x1FFF)
        serializer.integer(fo_val, 2)
        serializer.integer(self.ttl, 1)
        serializer.integer(self.proto, 1)
        serializer.integer(self.cksum, 2)
        serializer.integer(self.src, 4)
        serializer.integer(self.dst, 4)

    def __str__(self) -> str:
        return (
            f"IPv{self.ver:x} len={self.len} proto={self.proto} ttl={self.ttl}"
            f" src={_dotted(self.src)} dst={_dotted(self.dst)}"
        )


@dataclass
class IPv4Datagram:
    """An IPv4 header and its payload buffers."""

    header: IPv4Header = field(default_factory=IPv4Header)
    payload: List[bytes] = field(default_factory=list)

    @classmethod
    def parse(cls, parser: Parser) -> "IPv4Datagram":
        header = IPv4Header.parse(parser)
        parser.truncate(header.payload_length())
        return cls(header=header, payload=parser.all_remaining())

    def serialize(self, serializer: Serializer) -> None:
        self.header.serialize(serializer)
        serializer.buffer(self.payload)


InternetDatagram = IPv4Datagram