"""The messages exchanged between TCP endpoints, and TCP's port and checksum fields."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class TCPSenderMessage:
    """What a TCP sender tells its peer's receiver.

    ``seqno`` is the raw 32-bit sequence number of the first thing the
    segment carries: the SYN flag if set, otherwise the first payload byte.
    """

    seqno: int = 0
    syn: bool = False
    payload: bytes = b""
    fin: bool = False
    rst: bool = False

    def sequence_length(self) -> int:
        """How many sequence numbers the message occupies."""
        return int(self.syn) + len(self.payload) + int(self.fin)


@dataclass
class TCPReceiverMessage:
    """What a TCP receiver tells its peer's sender.

    ``ackno`` is the raw 32-bit next sequence number needed, or None before
    the initial sequence number is known.
    """

    ackno: Optional[int] = None
    window_size: int = 0
    rst: bool = False


@dataclass
class TCPMessage:
    """A full message between TCP endpoints, without ports or checksum."""

    sender: TCPSenderMessage = field(default_factory=TCPSenderMessage)
    receiver: TCPReceiverMessage = field(default_factory=TCPReceiverMessage)


@dataclass
class UserDatagramInfo:
    """The ports and checksum of a UDP header, or the like part of a TCP header."""

    src_port: int = 0
    dst_port: int = 0
    cksum: int = 0