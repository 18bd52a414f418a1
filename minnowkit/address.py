"""IPv4 and IPv6 socket addresses and name resolution."""

from __future__ import annotations

import ipaddress
import socket
from typing import Any, Tuple

from .errors import TaggedError

_INTERNET_FAMILIES = (socket.AF_INET, socket.AF_INET6)


def _lookup(node: str, service: str, flags: int) -> Tuple[int, Any]:
    try:
        results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
    except socket.gaierror as exc:
        raise TaggedError(f"getaddrinfo({node}, {service})", exc.errno, exc.strerror) from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    family, _, _, _, sockaddr = results[0]
    return family, sockaddr


class Address:
    """A socket address: an Internet host and port, or another family's address."""

    def __init__(self, ip: str, port: int = 0) -> None:
        """Build from a numeric IPv4 address string and a port; no lookup is done."""
        if not isinstance(port, int) or not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port!r}")
        flags = socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
        self._family, self._sockaddr = _lookup(ip, str(port), flags)

    @classmethod
    def _make(cls, family: int, sockaddr: Any) -> "Address":
        obj = cls.__new__(cls)
        obj._family = family
        obj._sockaddr = tuple(sockaddr) if isinstance(sockaddr, list) else sockaddr
        return obj

    @classmethod
    def resolve(cls, hostname: str, service: str) -> "Address":
        """Resolve a host name and service name (or numeric strings) to an IPv4 address."""
        family, sockaddr = _lookup(hostname, service, socket.AI_ALL)
        return cls._make(family, sockaddr)

    @classmethod
    def from_sockaddr(cls, family: int, sockaddr: Any) -> "Address":
        """Wrap an address as the socket module reports it for ``family``."""
        return cls._make(family, sockaddr)

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> "Address":
        """Build an IPv4 address (port 0) from its 32-bit numeric value."""
        return cls._make(socket.AF_INET, (str(ipaddress.IPv4Address(ip_address)), 0))

    def ip_port(self) -> Tuple[str, int]:
        """Return the numeric host string and the port."""
        if self._family not in _INTERNET_FAMILIES:
            raise RuntimeError("Address.ip_port() called on non-Internet address")
        flags = socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
        try:
            host, port = socket.getnameinfo(self._sockaddr, flags)
        except socket.gaierror as exc:
            raise TaggedError("getnameinfo", exc.errno, exc.strerror) from exc
        return host, int(port)

    def ip(self) -> str:
        return self.ip_port()[0]

    def port(self) -> int:
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """Return the IPv4 address as an integer in host order."""
        if self._family != socket.AF_INET:
            raise RuntimeError("ipv4_numeric called on non-IPV4 address")
        return int(ipaddress.IPv4Address(self._sockaddr[0]))

    def sockaddr(self) -> Any:
        """Return the address in the form the socket module takes."""
        return self._sockaddr

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((int(self._family), self._sockaddr))

    def __str__(self) -> str:
        if self._family in _INTERNET_FAMILIES:
            ip, port = self.ip_port()
            return f"{ip}:{port}"
        return "(non-Internet address)"

    def __repr__(self) -> str:
        return f"Address({str(self)!r})"