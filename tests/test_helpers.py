from minnowkit.arp import ARPMessage
from minnowkit.ethernet import EthernetFrame, EthernetHeader
from minnowkit.helpers import clone, concat, parse, pretty_print, serialize, summary
from minnowkit.ipv4 import IPv4Datagram, IPv4Header

SRC = bytes([0x02, 0, 0, 0, 0, 0x01])
DST = bytes([0x02, 0, 0, 0, 0, 0x02])


def _frame(frame_type, payload):
    return EthernetFrame(header=EthernetHeader(dst=DST, src=SRC, type=frame_type), payload=payload)


def _datagram(payload):
    header = IPv4Header(len=IPv4Header.LENGTH + len(payload), src=0x0A000001, dst=0x0A000002)
    header.compute_checksum()
    return IPv4Datagram(header=header, payload=[payload])


def test_pretty_print_plain():
    assert pretty_print(b"hello") == "hello"


def test_pretty_print_escapes():
    assert pretty_print(b'a"\x00') == "a\\x22\\x00"


def test_pretty_print_exact_length_not_truncated():
    assert pretty_print(b"a" * 32) == "a" * 32


def test_pretty_print_truncates():
    result = pretty_print(b"a" * 40)
    assert len(result) == 32
    assert result.endswith("...")


def test_pretty_print_tiny_limit():
    assert pretty_print(b"abc", 1) == "a..."


def test_concat():
    assert concat([b"ab", b"", b"cd"]) == b"abcd"


def test_serialize_parse_round_trip():
    header = EthernetHeader(dst=DST, src=SRC, type=EthernetHeader.TYPE_ARP)
    assert parse(EthernetHeader, serialize(header)) == header


def test_parse_failure_returns_none():
    assert parse(EthernetHeader, [b"\x00\x01"]) is None


def test_datagram_in_frame_round_trip():
    dgram = _datagram(b"payload")
    frame = _frame(EthernetHeader.TYPE_IPv4, serialize(dgram))
    parsed_frame = parse(EthernetFrame, serialize(frame))
    assert parsed_frame.header == frame.header
    parsed = parse(IPv4Datagram, parsed_frame.payload)
    assert parsed.header == dgram.header
    assert concat(parsed.payload) == b"payload"


def test_clone_is_independent():
    frame = _frame(EthernetHeader.TYPE_IPv4, [b"abc"])
    copy = clone(frame)
    assert copy == frame
    copy.payload.append(b"more")
    copy.header.type = EthernetHeader.TYPE_ARP
    assert frame.payload == [b"abc"]
    assert frame.header.type == EthernetHeader.TYPE_IPv4


def test_summary_ipv4():
    dgram = _datagram(b"hi")
    frame = _frame(EthernetHeader.TYPE_IPv4, serialize(dgram))
    assert summary(frame) == f'{frame.header} payload: {dgram.header} payload="hi"'


def test_summary_bad_ipv4():
    frame = _frame(EthernetHeader.TYPE_IPv4, [b"\x45\x00"])
    assert summary(frame).endswith("payload: bad IPv4 datagram")


def test_summary_arp():
    arp = ARPMessage(opcode=ARPMessage.OPCODE_REQUEST, sender_ethernet_address=SRC, target_ip_address=0x0A000002)
    frame = _frame(EthernetHeader.TYPE_ARP, serialize(arp))
    assert summary(frame) == f"{frame.header} payload: {arp}"


def test_summary_bad_arp():
    frame = _frame(EthernetHeader.TYPE_ARP, [b"\x00\x09"])
    assert summary(frame).endswith("payload: bad ARP message")


def test_summary_unknown_type():
    frame = _frame(0x86DD, [b"x"])
    assert summary(frame).endswith("payload: unknown frame type")