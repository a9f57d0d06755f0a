# hbbkit

Building blocks for remote-desktop style tools.

## Modules

- `hbbkit.keys`: the `Key` enum, `Layout` (a key named by its character) and
  `Raw` (a raw 16-bit keycode), the `MouseButton` enum, and the abstract
  `MouseControllable` and `KeyboardControllable` interfaces that an input
  back end implements. `KeyboardControllable.key_sequence_parse` runs a
  string written in the key DSL against the back end.
- `hbbkit.dsl`: the key DSL, e.g. `"{+CTRL}a{-CTRL}"` or
  `"{+UNICODE}{{Hello}} ❤️{-UNICODE}"`. `{{` and `}}` stand for literal
  braces; the tags are `+/-SHIFT`, `+/-CTRL`, `+/-META`, `+/-ALT` and
  `+/-UNICODE`. `tokenize` returns a list of `Token`s; `evaluate` parses the
  whole text first and then drives a `KeyboardControllable`. Bad input raises
  a `ParseError` subclass: `UnknownTagError`, `UnexpectedOpenError`,
  `UnmatchedOpenError` or `UnmatchedCloseError`.
- `hbbkit.xdo`: X11 key-sequence names (`keysequence`), button numbers
  (`mouse_button_code`), modifier-mask checks (`key_state_from_mask`) and
  scroll clicks (`scroll_x_clicks`, `scroll_y_clicks`).
- `hbbkit.winkeys`: Windows virtual-key codes (`key_to_vk`), absolute
  coordinate mapping (`absolute_coordinates`), wheel data (`wheel_data`) and
  key-state interpretation (`key_state_from_flags`).
- `hbbkit.mackeys`: macOS keycodes (`key_to_keycode`, `layout_keycode`),
  modifier `EventFlags` (`modifier_flag`), a double-click `ClickCounter`,
  `scroll_steps` and `relative_target`.
- `hbbkit.bytes_codec`: `BytesCodec`, which puts a 1–4 byte little-endian
  length header in front of each packet, or passes bytes through in raw mode.
  `decode` raises `PacketTooLargeError` above `max_packet_length`; `encode`
  raises `CodecError` for packets over 0x3FFFFFFF bytes.
- `hbbkit.compress`: zstd `compress` and `decompress`; both return empty
  bytes on failure.
- `hbbkit.addr`: `mangle` / `unmangle` for IPv4 host and port,
  `get_version_from_url` and `to_socket_addr`.
- `hbbkit.tcp`: asyncio `FramedStream` with optional secretbox encryption
  (`set_key`), `get_nonce`, and `new_listener`.
- `hbbkit.udp`: asyncio `FramedSocket`, one message per datagram.
- `hbbkit.fs`: `read_dir`, `get_recursive_files`, `remove_all_empty_dir`,
  `remove_file`, `create_dir`, and `TransferJob`, which reads files as
  (possibly compressed) `FileTransferBlock`s or writes received blocks to
  `<name>.download` files and moves them into place.

## Install

```
pip install .
pip install ".[test]"   # with the test tools
```

## Examples

Framing packets:

```python
from hbbkit.bytes_codec import BytesCodec

codec = BytesCodec()
buffer = bytearray(codec.encode(b"hello"))
print(codec.decode(buffer))   # b'hello'
```

Parsing the key DSL:

```python
from hbbkit.dsl import tokenize

for token in tokenize("{{Hello}} {+CTRL}hi{-CTRL}"):
    print(token)
```

Mangling an address before it goes on the wire:

```python
from hbbkit.addr import mangle, unmangle

data = mangle("192.168.16.32", 21116)
print(unmangle(data))   # ('192.168.16.32', 21116)
```

## What it does not do

- There is no input back end that actually moves the mouse or presses keys.
  `MouseControllable` and `KeyboardControllable` are interfaces only; the
  platform modules supply the key tables and calculations a back end needs.
- There are no message definitions. `FramedStream.send` and
  `FramedSocket.send` take any object with a `SerializeToString()` method;
  `send_raw` takes bytes.
- There is no command-line program and no server beyond what
  `new_listener` sets up for a handler you supply.

## Tests

```
pytest
```