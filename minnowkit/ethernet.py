"""Ethernet addresses, frame headers and frames."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Iterable, List, Union

from .parser import Parser, Serializer

EthernetAddress = bytes
AddressLike = Union[bytes, bytearray, memoryview, Iterable[int]]

ADDRESS_LENGTH = 6

ETHERNET_BROADCAST: EthernetAddress = b"\xff" * ADDRESS_LENGTH


def _checked_address(value: AddressLike) -> EthernetAddress:
    address = bytes(value)
    if len(address) != ADDRESS_LENGTH:
        raise ValueError(f"an Ethernet address has {ADDRESS_LENGTH} bytes, not {len(address)}")
    return address


def format_ethernet_address(address: AddressLike) -> str:
    """Return an address as six colon-separated pairs of lower-case hex digits."""
    return ":".join(f"{octet:02x}" for octet in _checked_address(address))


@dataclass
class EthernetHeader:
    """The destination, source and type fields at the start of an Ethernet frame."""

    LENGTH: ClassVar[int] = 14
    TYPE_IPv4: ClassVar[int] = 0x800
    TYPE_ARP: ClassVar[int] = 0x806

    dst: EthernetAddress = bytes(ADDRESS_LENGTH)
    src: EthernetAddress = bytes(ADDRESS_LENGTH)
    type: int = 0

    def __post_init__(self) -> None:
        self.dst = _checked_address(self.dst)
        self.src = _checked_address(self.src)

    @classmethod
    def parse(cls, parser: Parser) -> "EthernetHeader":
        dst = parser.read_bytes(ADDRESS_LENGTH)
        src = parser.read_bytes(ADDRESS_LENGTH)
        frame_type = parser.integer(2)
        return cls(dst=dst, src=src, type=frame_type)

    def serialize(self, serializer: Serializer) -> None:
        for octet in self.dst + self.src:
            serializer.integer(octet, 1)
        serializer.integer(self.type, 2)

    def __str__(self) -> str:
        if self.type == self.TYPE_IPv4:
            kind = "IPv4"
        elif self.type == self.TYPE_ARP:
            kind = "ARP"
        else:
            kind = f"[unknown type {self.type:x}!]"
        return (
            f"dst={format_ethernet_address(self.dst)}"
            f" src={format_ethernet_address(self.src)} type={kind}"
        )


@dataclass
class EthernetFrame:
    """An Ethernet header followed by its payload buffers."""

    header: EthernetHeader = field(default_factory=EthernetHeader)
    payload: List[bytes] = field(default_factory=list)

    @classmethod
    def parse(cls, parser: Parser) -> "EthernetFrame":
        header = EthernetHeader.parse(parser)
        return cls(header=header, payload=parser.all_remaining())

    def serialize(self, serializer: Serializer) -> None:
        self.header.serialize(serializer)
        serializer.buffer(self.payload)