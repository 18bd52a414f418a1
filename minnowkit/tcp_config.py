"""Configuration for TCP endpoints and the adapters that carry their segments."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Optional

from .address import Address


@dataclass
class TCPConfig:
    """Settings for a TCP sender and receiver."""

    DEFAULT_CAPACITY: ClassVar[int] = 64000
    MAX_PAYLOAD_SIZE: ClassVar[int] = 1000
    TIMEOUT_DFLT: ClassVar[int] = 1000
    MAX_RETX_ATTEMPTS: ClassVar[int] = 8

    rt_timeout: int = 1000
    recv_capacity: int = 64000
    send_capacity: int = 64000
    isn: int = 137


def _any_address() -> Address:
    return Address("0.0.0.0", 0)


@dataclass
class FdAdapterConfig:
    """Addresses and loss rates for an adapter."""

    source: Address = field(default_factory=_any_address)
    destination: Address = field(default_factory=_any_address)
    loss_rate_dn: int = 0
    loss_rate_up: int = 0


class FdAdapterBase:
    """State shared by adapters: their configuration and whether they are listening."""

    def __init__(self, config: Optional[FdAdapterConfig] = None) -> None:
        self.config = config if config is not None else FdAdapterConfig()
        self.listening = False
        self.time_elapsed_ms = 0

    def set_listening(self, listening: bool) -> None:
        self.listening = bool(listening)

    def tick(self, ms: int) -> None:
        """Note that ``ms`` milliseconds have passed."""
        if ms < 0:
            raise ValueError("elapsed time cannot be negative")
        self.time_elapsed_ms += ms