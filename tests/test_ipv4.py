import pytest

from minnowkit.checksum import InternetChecksum
from minnowkit.ipv4 import IPv4Datagram, IPv4Header
from minnowkit.parser import Parser, Serializer

SAMPLE = bytes.fromhex("4500007300004000401" "1b861c0a80001c0a800c7")


def _wire(obj):
    s = Serializer()
    obj.serialize(s)
    return b"".join(s.finish())


def _sample_header():
    return IPv4Header(len=0x73, id=0, df=True, ttl=0x40, proto=0x11, src=0xC0A80001, dst=0xC0A800C7)


def test_parse_sample_header():
    parser = Parser([SAMPLE])
    header = IPv4Header.parse(parser)
    assert not parser.has_error()
    assert header.src == 0xC0A80001
    assert header.dst == 0xC0A800C7
    assert header.cksum == 0xB861
    assert header.df and not header.mf


def test_compute_checksum_matches_sample():
    header = _sample_header()
    header.compute_checksum()
    assert header.cksum == 0xB861
    assert _wire(header) == SAMPLE


def test_serialize_round_trip():
    header = IPv4Header(len=60, id=7, ttl=IPv4Header.DEFAULT_TTL, src=0x0A000001, dst=0x0A000002)
    header.compute_checksum()
    parser = Parser([_wire(header)])
    parsed = IPv4Header.parse(parser)
    assert not parser.has_error()
    assert parsed == header


def test_bad_checksum_sets_error():
    corrupted = bytearray(SAMPLE)
    corrupted[11] ^= 0x01
    parser = Parser([bytes(corrupted)])
    IPv4Header.parse(parser)
    assert parser.has_error()


def test_wrong_version_sets_error():
    wire = bytearray(SAMPLE)
    wire[0] = 0x65
    parser = Parser([bytes(wire)])
    IPv4Header.parse(parser)
    assert parser.has_error()


def test_short_header_length_sets_error():
    wire = bytearray(SAMPLE)
    wire[0] = 0x44
    parser = Parser([bytes(wire)])
    IPv4Header.parse(parser)
    assert parser.has_error()


def test_truncated_header_sets_error():
    parser = Parser([SAMPLE[:12]])
    IPv4Header.parse(parser)
    assert parser.has_error()


def test_serialize_rejects_wrong_version():
    with pytest.raises(RuntimeError):
        _wire(IPv4Header(ver=6))


def test_payload_length():
    header = IPv4Header(len=IPv4Header.LENGTH + 17)
    assert header.payload_length() == 17


def test_pseudo_checksum_matches_pseudo_header():
    header = IPv4Header(len=IPv4Header.LENGTH + 9, src=0x0A000001, dst=0xC0A8FFFE)
    pseudo = (
        header.src.to_bytes(4, "big")
        + header.dst.to_bytes(4, "big")
        + bytes([0, header.proto])
        + header.payload_length().to_bytes(2, "big")
    )
    direct = InternetChecksum()
    direct.add(pseudo)
    assert InternetChecksum(header.pseudo_checksum()).value() == direct.value()


def test_header_string():
    header = _sample_header()
    assert str(header) == "IPv4 len=115 proto=17 ttl=64 src=192.168.0.1 dst=192.168.0.199"


def test_datagram_round_trip_drops_trailing_bytes():
    payload = b"datagram payload"
    header = IPv4Header(len=IPv4Header.LENGTH + len(payload), src=0x0A000001, dst=0x0A000002)
    header.compute_checksum()
    wire = _wire(IPv4Datagram(header=header, payload=[payload]))
    parser = Parser([wire[:7], wire[7:] + b"\x00\x00\x00"])
    dgram = IPv4Datagram.parse(parser)
    assert not parser.has_error()
    assert dgram.header == header
    assert b"".join(dgram.payload) == payload


def test_datagram_skips_options():
    header = IPv4Header(hlen=6, len=24 + 3, src=0x0A000001, dst=0x0A000002)
    header.compute_checksum()
    wire = _wire(header) + b"\x00" * 4 + b"abc"
    parser = Parser([wire])
    dgram = IPv4Datagram.parse(parser)
    assert not parser.has_error()
    assert b"".join(dgram.payload) == b"abc"