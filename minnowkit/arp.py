"""ARP messages for Ethernet and IPv4."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import ClassVar

from .ethernet import (
    ADDRESS_LENGTH,
    EthernetAddress,
    EthernetHeader,
    _checked_address,
    format_ethernet_address,
)
from .parser import Parser, Serializer

_IPV4_ADDRESS_LENGTH = 4


def _dotted(address: int) -> str:
    return str(ipaddress.IPv4Address(address & 0xFFFFFFFF))


@dataclass
class ARPMessage:
    """An ARP request or reply mapping IPv4 addresses to Ethernet addresses."""

    LENGTH: ClassVar[int] = 28
    TYPE_ETHERNET: ClassVar[int] = 1
    OPCODE_REQUEST: ClassVar[int] = 1
    OPCODE_REPLY: ClassVar[int] = 2

    hardware_type: int = 1
    protocol_type: int = EthernetHeader.TYPE_IPv4
    hardware_address_size: int = ADDRESS_LENGTH
    protocol_address_size: int = _IPV4_ADDRESS_LENGTH
    opcode: int = 0
    sender_ethernet_address: EthernetAddress = bytes(ADDRESS_LENGTH)
    sender_ip_address: int = 0
    target_ethernet_address: EthernetAddress = bytes(ADDRESS_LENGTH)
    target_ip_address: int = 0

    def __post_init__(self) -> None:
        self.sender_ethernet_address = _checked_address(self.sender_ethernet_address)
        self.target_ethernet_address = _checked_address(self.target_ethernet_address)

    def supported(self) -> bool:
        """Is this an Ethernet/IPv4 request or reply?"""
        return (
            self.hardware_type == self.TYPE_ETHERNET
            and self.protocol_type == EthernetHeader.TYPE_IPv4
            and self.hardware_address_size == ADDRESS_LENGTH
            and self.protocol_address_size == _IPV4_ADDRESS_LENGTH
            and self.opcode in (self.OPCODE_REQUEST, self.OPCODE_REPLY)
        )

    @classmethod
    def parse(cls, parser: Parser) -> "ARPMessage":
        """Read a message, flagging a parser error if its kind is unsupported."""
        message = cls(
            hardware_type=parser.integer(2),
            protocol_type=parser.integer(2),
            hardware_address_size=parser.integer(1),
            protocol_address_size=parser.integer(1),
            opcode=parser.integer(2),
        )
        if not message.supported():
            parser.set_error()
            return message
        message.sender_ethernet_address = parser.read_bytes(ADDRESS_LENGTH)
        message.sender_ip_address = parser.integer(4)
        message.target_ethernet_address = parser.read_bytes(ADDRESS_LENGTH)
        message.target_ip_address = parser.integer(4)
        return message

    def serialize(self, serializer: Serializer) -> None:
        if not self.supported():
            raise RuntimeError(
                "ARPMessage: unsupported field combination (must be Ethernet/IP, and request or reply)"
            )
        serializer.integer(self.hardware_type, 2)
        serializer.integer(self.protocol_type, 2)
        serializer.integer(self.hardware_address_size, 1)
        serializer.integer(self.protocol_address_size, 1)
        serializer.integer(self.opcode, 2)
        for octet in self.sender_ethernet_address:
            serializer.integer(octet, 1)
        serializer.integer(self.sender_ip_address, 4)
        for octet in self.target_ethernet_address:
            serializer.integer(octet, 1)
        serializer.integer(self.target_ip_address, 4)

    def __str__(self) -> str:
        if self.opcode == self.OPCODE_REQUEST:
            kind = "REQUEST"
        elif self.opcode == self.OPCODE_REPLY:
            kind = "REPLY"
        else:
            kind = "(unknown type)"
        return (
            f"opcode={kind}, sender={format_ethernet_address(self.sender_ethernet_address)}"
            f"/{_dotted(self.sender_ip_address)}"
            f", target={format_ethernet_address(self.target_ethernet_address)}"
            f"/{_dotted(self.target_ip_address)}"
        )