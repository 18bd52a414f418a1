"""Packet formats, checksums, sockets, TUN devices and an event loop for a user-space TCP/IP stack."""

__version__ = "0.1.0"