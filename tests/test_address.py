import socket

import pytest

from minnowkit.address import Address
from minnowkit.errors import TaggedError


def test_numeric_address_fields():
    addr = Address("1.1.1.1", 53)
    assert addr.ip() == "1.1.1.1"
    assert addr.port() == 53
    assert addr.ip_port() == ("1.1.1.1", 53)


def test_to_string():
    assert str(Address("1.1.1.1", 53)) == "1.1.1.1:53"


def test_zero_means_any_address():
    assert Address("0", 0).ip() == "0.0.0.0"


def test_default_port():
    assert Address("18.243.0.1").port() == 0


def test_equality():
    assert Address("10.0.0.1", 80) == Address("10.0.0.1", 80)
    assert not (Address("10.0.0.1", 80) == Address("10.0.0.1", 81))
    assert len({Address("10.0.0.1", 80), Address("10.0.0.1", 80)}) == 1


def test_ipv4_numeric_round_trip():
    addr = Address("18.243.0.1", 0)
    assert Address.from_ipv4_numeric(addr.ipv4_numeric()) == addr


def test_from_ipv4_numeric():
    assert Address.from_ipv4_numeric(0x7F000001).ip() == "127.0.0.1"


def test_from_ipv4_numeric_out_of_range():
    with pytest.raises(ValueError):
        Address.from_ipv4_numeric(1 << 32)


def test_invalid_numeric_host():
    with pytest.raises(TaggedError) as info:
        Address("not-an-ip", 0)
    assert str(info.value).startswith("getaddrinfo(not-an-ip, 0)")


def test_port_out_of_range():
    with pytest.raises(ValueError):
        Address("1.2.3.4", 70000)


def test_resolve_numeric():
    assert Address.resolve("127.0.0.1", "80") == Address("127.0.0.1", 80)


def test_sockaddr_tuple():
    addr = Address("10.1.2.3", 4242)
    assert addr.sockaddr() == ("10.1.2.3", 4242)
    assert Address.from_sockaddr(socket.AF_INET, addr.sockaddr()) == addr


def test_ipv6_address():
    addr = Address.from_sockaddr(socket.AF_INET6, ("::1", 80, 0, 0))
    assert addr.ip_port() == ("::1", 80)
    with pytest.raises(RuntimeError):
        addr.ipv4_numeric()


def test_non_internet_address():
    addr = Address.from_sockaddr(socket.AF_UNIX, "/tmp/minnow.sock")
    assert str(addr) == "(non-Internet address)"
    with pytest.raises(RuntimeError):
        addr.ip_port()
    with pytest.raises(RuntimeError):
        addr.ipv4_numeric()