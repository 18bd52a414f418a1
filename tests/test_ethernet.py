import pytest

from minnowkit.ethernet import (
    ETHERNET_BROADCAST,
    EthernetFrame,
    EthernetHeader,
    format_ethernet_address,
)
from minnowkit.parser import Parser, Serializer

SRC = bytes([0x02, 0, 0, 0, 0, 0x01])
DST = bytes([0x02, 0, 0, 0, 0, 0x02])


def _wire(obj):
    s = Serializer()
    obj.serialize(s)
    return b"".join(s.finish())


def test_format_broadcast():
    assert format_ethernet_address(ETHERNET_BROADCAST) == "ff:ff:ff:ff:ff:ff"


def test_format_pads_with_zeros():
    assert format_ethernet_address([0, 1, 2, 0xA, 0xB, 0xC]) == "00:01:02:0a:0b:0c"


def test_format_rejects_wrong_length():
    with pytest.raises(ValueError):
        format_ethernet_address(b"\x01\x02")


def test_header_rejects_wrong_length():
    with pytest.raises(ValueError):
        EthernetHeader(dst=b"\x00" * 5, src=SRC, type=EthernetHeader.TYPE_ARP)


def test_header_wire_layout():
    header = EthernetHeader(dst=DST, src=SRC, type=EthernetHeader.TYPE_ARP)
    wire = _wire(header)
    assert len(wire) == EthernetHeader.LENGTH
    assert wire == DST + SRC + b"\x08\x06"


def test_header_round_trip():
    header = EthernetHeader(dst=ETHERNET_BROADCAST, src=SRC, type=EthernetHeader.TYPE_IPv4)
    parser = Parser([_wire(header)])
    parsed = EthernetHeader.parse(parser)
    assert not parser.has_error()
    assert parsed == header


def test_truncated_header_sets_error():
    header = EthernetHeader(dst=DST, src=SRC, type=EthernetHeader.TYPE_IPv4)
    parser = Parser([_wire(header)[:10]])
    EthernetHeader.parse(parser)
    assert parser.has_error()


def test_header_strings():
    ipv4 = EthernetHeader(dst=DST, src=SRC, type=EthernetHeader.TYPE_IPv4)
    assert str(ipv4) == f"dst={format_ethernet_address(DST)} src={format_ethernet_address(SRC)} type=IPv4"
    arp = EthernetHeader(dst=DST, src=SRC, type=EthernetHeader.TYPE_ARP)
    assert str(arp).endswith("type=ARP")
    other = EthernetHeader(dst=DST, src=SRC, type=0x1234)
    assert str(other).endswith("type=[unknown type 1234!]")


def test_frame_round_trip():
    frame = EthernetFrame(
        header=EthernetHeader(dst=DST, src=SRC, type=EthernetHeader.TYPE_IPv4),
        payload=[b"hello world"],
    )
    parser = Parser([_wire(frame)])
    parsed = EthernetFrame.parse(parser)
    assert not parser.has_error()
    assert parsed.header == frame.header
    assert b"".join(parsed.payload) == b"hello world"


def test_frame_with_empty_payload():
    frame = EthernetFrame(header=EthernetHeader(dst=DST, src=SRC, type=EthernetHeader.TYPE_ARP))
    parser = Parser([_wire(frame)])
    parsed = EthernetFrame.parse(parser)
    assert parsed.payload == []
    assert parsed.header == frame.header