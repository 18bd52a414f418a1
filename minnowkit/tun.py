"""File descriptors for Linux TUN and TAP devices."""

from __future__ import annotations

import errno
import fcntl
import os
import struct

from .errors import UnixError
from .file_descriptor import FileDescriptor

CLONEDEV = "/dev/net/tun"

IFNAMSIZ = 16
IFF_TUN = 0x0001
IFF_TAP = 0x0002
IFF_NO_PI = 0x1000
TUNSETIFF = 0x400454CA

_IFREQ = struct.Struct(f"{IFNAMSIZ}sh22x")


def _make_ifreq(devname: str, is_tun: bool) -> bytes:
    """Build the interface request naming the device and its mode, without packet info."""
    name = devname.encode().split(b"\0", 1)[0][: IFNAMSIZ - 1]
    flags = (IFF_TUN if is_tun else IFF_TAP) | IFF_NO_PI
    return _IFREQ.pack(name, flags)


def _open_clone_device() -> int:
    try:
        return os.open(CLONEDEV, os.O_RDWR | os.O_CLOEXEC)
    except OSError as exc:
        raise UnixError("open", exc.errno if exc.errno is not None else errno.EIO) from exc


class TunTapFD(FileDescriptor):
    """A descriptor attached to an existing persistent TUN or TAP device."""

    def __init__(self, devname: str, is_tun: bool) -> None:
        super().__init__(_open_clone_device())
        try:
            fcntl.ioctl(self.fileno(), TUNSETIFF, _make_ifreq(devname, is_tun))
        except OSError as exc:
            self.close()
            raise UnixError("ioctl", exc.errno) from exc


class TunFD(TunTapFD):
    """A descriptor for a TUN device, which carries IP datagrams."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, True)


class TapFD(TunTapFD):
    """A descriptor for a TAP device, which carries Ethernet frames."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, False)