from minnowkit.address import Address
from minnowkit.helpers import clone, concat, parse, serialize
from minnowkit.ipv4 import IPv4Datagram, IPv4Header
from minnowkit.tcp_config import FdAdapterConfig
from minnowkit.tcp_message import TCPMessage, TCPReceiverMessage, TCPSenderMessage
from minnowkit.tcp_over_ip import TCPOverIPv4Adapter

CLIENT = ("10.0.0.1", 1000)
SERVER = ("10.0.0.2", 2000)


def adapter(source, destination):
    return TCPOverIPv4Adapter(
        FdAdapterConfig(source=Address(*source), destination=Address(*destination))
    )


def message(syn=True):
    return TCPMessage(
        sender=TCPSenderMessage(seqno=7, syn=syn, payload=b"hello"),
        receiver=TCPReceiverMessage(ackno=3, window_size=100),
    )


def test_wrap_sets_header_fields():
    client = adapter(CLIENT, SERVER)
    dgram = client.wrap_tcp_in_ip(message())
    assert dgram.header.src == Address(*CLIENT).ipv4_numeric()
    assert dgram.header.dst == Address(*SERVER).ipv4_numeric()
    assert dgram.header.proto == IPv4Header.PROTO_TCP
    assert dgram.header.len == 20 + 20 + len(b"hello")
    assert len(concat(dgram.payload)) == dgram.header.payload_length()


def test_wrapped_datagram_parses():
    dgram = adapter(CLIENT, SERVER).wrap_tcp_in_ip(message())
    reparsed = parse(IPv4Datagram, serialize(dgram))
    assert reparsed is not None
    assert reparsed == dgram


def test_round_trip_between_peers():
    client = adapter(CLIENT, SERVER)
    server = adapter(SERVER, CLIENT)
    msg = message()
    assert server.unwrap_tcp_in_ip(client.wrap_tcp_in_ip(msg)) == msg


def test_wrong_destination_ip_rejected():
    client = adapter(CLIENT, SERVER)
    other = adapter(("10.0.0.3", 2000), CLIENT)
    assert other.unwrap_tcp_in_ip(client.wrap_tcp_in_ip(message())) is None


def test_wrong_source_ip_rejected():
    client = adapter(CLIENT, SERVER)
    server = adapter(SERVER, ("10.0.0.9", 1000))
    assert server.unwrap_tcp_in_ip(client.wrap_tcp_in_ip(message())) is None


def test_non_tcp_protocol_rejected():
    client = adapter(CLIENT, SERVER)
    server = adapter(SERVER, CLIENT)
    dgram = client.wrap_tcp_in_ip(message())
    dgram.header.proto = 17
    assert server.unwrap_tcp_in_ip(dgram) is None


def test_bad_tcp_checksum_rejected():
    client = adapter(CLIENT, SERVER)
    server = adapter(SERVER, CLIENT)
    dgram = client.wrap_tcp_in_ip(message())
    wire = bytearray(concat(dgram.payload))
    wire[-1] ^= 0x01
    dgram.payload = [bytes(wire)]
    assert server.unwrap_tcp_in_ip(dgram) is None


def test_wrong_ports_rejected():
    client = adapter(CLIENT, SERVER)
    assert adapter(("10.0.0.2", 2001), CLIENT).unwrap_tcp_in_ip(
        client.wrap_tcp_in_ip(message())
    ) is None
    assert adapter(SERVER, ("10.0.0.1", 1001)).unwrap_tcp_in_ip(
        client.wrap_tcp_in_ip(message())
    ) is None


def test_listening_accepts_syn_and_learns_peer():
    client = adapter(CLIENT, SERVER)
    server = adapter(("0.0.0.0", 2000), ("0.0.0.0", 0))
    server.set_listening(True)
    msg = message()
    got = server.unwrap_tcp_in_ip(client.wrap_tcp_in_ip(clone(msg)))
    assert got == msg
    assert server.listening is False
    assert server.config.source == Address(*SERVER)
    assert server.config.destination == Address(*CLIENT)


def test_listening_ignores_non_syn():
    client = adapter(CLIENT, SERVER)
    server = adapter(("0.0.0.0", 2000), ("0.0.0.0", 0))
    server.set_listening(True)
    assert server.unwrap_tcp_in_ip(client.wrap_tcp_in_ip(message(syn=False))) is None
    assert server.listening is True
    assert server.config.destination == Address("0.0.0.0", 0)