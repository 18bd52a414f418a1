"""An adapter wrapper that drops segments at random."""

from __future__ import annotations

from typing import Any, Optional

from .randomness import get_random_engine
from .tcp_config import FdAdapterConfig
from .tcp_message import TCPMessage


class LossyFdAdapter:
    """Wraps an adapter, dropping reads and writes at its configured loss rates.

    A loss rate is out of 65536: a segment is dropped when a random 16-bit
    value falls below it.
    """

    def __init__(self, adapter: Any) -> None:
        self._adapter = adapter
        self._rand = get_random_engine()

    def _should_drop(self, uplink: bool) -> bool:
        cfg = self._adapter.config
        loss = cfg.loss_rate_up if uplink else cfg.loss_rate_dn
        return loss != 0 and self._rand.getrandbits(16) < loss

    def fd(self) -> Any:
        return self._adapter.fd()

    def read(self) -> Optional[TCPMessage]:
        """Read from the wrapped adapter; None if nothing came or it was dropped."""
        message = self._adapter.read()
        if self._should_drop(False):
            return None
        return message

    def write(self, msg: TCPMessage) -> None:
        """Write through the wrapped adapter, unless the message is dropped."""
        if self._should_drop(True):
            return
        self._adapter.write(msg)

    def set_listening(self, listening: bool) -> None:
        self._adapter.set_listening(listening)

    def config(self) -> FdAdapterConfig:
        return self._adapter.config

    def tick(self, ms: int) -> None:
        self._adapter.tick(ms)