"""Conveniences for serialising, parsing, printing and copying packets."""

from __future__ import annotations

import copy
from typing import Any, Iterable, List, Optional, Type, TypeVar, Union

from .arp import ARPMessage
from .ethernet import EthernetFrame, EthernetHeader
from .ipv4 import IPv4Datagram
from .parser import Parser, Serializer

T = TypeVar("T")


def serialize(obj: Any) -> List[bytes]:
    """Serialise any object with a ``serialize(serializer)`` method."""
    serializer = Serializer()
    obj.serialize(serializer)
    return serializer.finish()


def parse(cls: Type[T], buffers: Any, *args: Any) -> Optional[T]:
    """Parse an instance of ``cls`` from buffers; return None if parsing failed."""
    parser = Parser(buffers)
    obj = cls.parse(parser, *args)  # type: ignore[attr-defined]
    return None if parser.has_error() else obj


def concat(buffers: Iterable[bytes]) -> bytes:
    """Join a sequence of buffers into one."""
    return b"".join(bytes(b) for b in buffers)


def pretty_print(data: Union[bytes, bytearray, str], max_length: int = 32) -> str:
    """Escape unprintable bytes and double quotes, truncating long output with '...'."""
    if isinstance(data, str):
        data = data.encode()
    out = ""
    truncated = False
    for byte in bytes(data):
        if len(out) >= max_length:
            truncated = True
            break
        if 0x20 <= byte <= 0x7E and byte != ord('"'):
            out += chr(byte)
        else:
            out += f"\\x{byte:02x}"
    if truncated:
        out = out[:-3] + "..." if len(out) >= 3 else out + "..."
    return out


def summary(frame: EthernetFrame) -> str:
    """Describe an Ethernet frame and, where it can be parsed, its payload."""
    out = f"{frame.header} payload: "
    if frame.header.type == EthernetHeader.TYPE_IPv4:
        dgram = parse(IPv4Datagram, list(frame.payload))
        if dgram is None:
            return out + "bad IPv4 datagram"
        return out + f'{dgram.header} payload="{pretty_print(concat(dgram.payload))}"'
    if frame.header.type == EthernetHeader.TYPE_ARP:
        arp = parse(ARPMessage, list(frame.payload))
        if arp is None:
            return out + "bad ARP message"
        return out + str(arp)
    return out + "unknown frame type"


def clone(obj: T) -> T:
    """Return an independent copy of a frame, datagram or message."""
    return copy.deepcopy(obj)