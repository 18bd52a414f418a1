# minnowkit

Building blocks for a user-space TCP/IP stack on Linux. The package provides wire formats and checksums for Ethernet frames, ARP messages, IPv4 datagrams and TCP segments. It also provides reference-counted file descriptors, sockets, TUN/TAP devices and a `poll`-based event loop to move them around.

It needs only the standard library.

## Modules

- `minnowkit.parser`
  - `Parser` reads big-endian integers (`integer(size)`) and byte runs (`read_bytes(size)`) from a list of buffers. If a read runs past the end, it does not raise. It sets an error flag (`has_error()`) and returns zeros.
  - `Serializer` does the reverse: `integer(value, size)`, `buffer(data)` and `finish()`.
- `minnowkit.checksum`: `InternetChecksum` is the ones'-complement Internet checksum. Data can be added in pieces of any length.
- `minnowkit.ethernet`: `EthernetHeader`, `EthernetFrame`, `ETHERNET_BROADCAST` and `format_ethernet_address`.
- `minnowkit.arp`: `ARPMessage`, which covers Ethernet/IPv4 requests and replies.
- `minnowkit.ipv4`
  - `IPv4Header` provides `compute_checksum`, `payload_length` and `pseudo_checksum`.
  - `IPv4Datagram` is also available as `InternetDatagram`.
- `minnowkit.tcp_message`: `TCPSenderMessage`, `TCPReceiverMessage`, `TCPMessage` and `UserDatagramInfo`.
- `minnowkit.tcp_segment`: `TCPSegment`, with `compute_checksum(pseudo_checksum)`.
- `minnowkit.helpers`
  - `serialize(obj)` and `parse(cls, buffers, *args)`. `parse` returns `None` when the bytes do not form a valid object.
  - `concat`, `pretty_print`, `summary(frame)` and `clone`.
- `minnowkit.address`: `Address`, an IPv4 host and port.
  - It can be built from a numeric string (`Address("10.0.0.1", 80)`).
  - It can also be built with `Address.resolve(hostname, service)`, `Address.from_ipv4_numeric` or `Address.from_sockaddr`.
- `minnowkit.file_descriptor`: `FileDescriptor`.
  - Handles made with `duplicate()` share one descriptor and its EOF, closed and read/write-count state.
  - It can be used as a context manager.
- `minnowkit.sockets`: `UDPSocket`, `TCPSocket`, `RawSocket`, `PacketSocket`, `LocalStreamSocket` and `LocalDatagramSocket`.
- `minnowkit.tun`: `TunFD` and `TapFD` attach to existing persistent TUN/TAP devices.
- `minnowkit.eventloop`
  - `EventLoop` has `add_rule` for plain rules and `add_fd_rule` for rules that watch a descriptor in a `Direction`.
  - `wait_next_event(timeout_ms)` serves at most one rule and returns an `EventResult`: `SUCCESS`, `TIMEOUT` or `EXIT`.
  - It raises if it detects a busy wait.
- `minnowkit.tcp_config`: `TCPConfig`, `FdAdapterConfig` and `FdAdapterBase`.
- `minnowkit.tcp_over_ip`: `TCPOverIPv4Adapter` wraps a `TCPMessage` in an IPv4 datagram and unwraps it again. It filters out datagrams that do not belong to the connection.
- `minnowkit.tuntap_adapter`: `TCPOverIPv4OverTunFdAdapter` does the same over a TUN descriptor.
- `minnowkit.lossy_fd_adapter`: `LossyFdAdapter` wraps an adapter and drops reads and writes at random.
  - The drop rates are set by the config's `loss_rate_dn` and `loss_rate_up`, each out of 65536.
- `minnowkit.errors`
  - `TaggedError` and `UnixError`.
  - `check_system_call`, which treats a negative value as a negated errno.
  - `notnull`.
- `minnowkit.randomness`: `get_random_engine()` returns a `random.Random` seeded from operating-system entropy.

## Example

```python
from minnowkit.helpers import parse, serialize, concat
from minnowkit.ipv4 import IPv4Header, IPv4Datagram

dgram = IPv4Datagram(header=IPv4Header(len=20 + 5, src=0x0A000001, dst=0x0A000002),
                     payload=[b"hello"])
dgram.header.compute_checksum()

wire = serialize(dgram)
parsed = parse(IPv4Datagram, wire)
if parsed is not None:
    print(parsed.header, concat(parsed.payload))
```

## Debug output

`minnowkit.debug.debug(fmt, *args, **kwargs)` formats a message with `str.format` and passes it to the current handler. The default handler writes `DEBUG: ...` to standard error.

Use `set_debug_handler` to capture messages and `reset_debug_handler` to restore the default. `debug` does nothing when Python runs with `-O`.

## What it does not do

The package carries TCP messages but does not produce them. It has no TCP sender, receiver, reassembler or connection state machine. There is no socket that runs a whole TCP connection, and there is no command-line program.

TUN/TAP devices, raw sockets and packet sockets need the matching Linux privileges, and the TUN device must already exist.

## Tests

The tests use pytest, which is available through the `test` extra (`pip install "minnowkit[test]"`).