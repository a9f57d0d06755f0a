"""Length-prefixed framing with a 1 to 4 byte variable-size header."""

from __future__ import annotations

import sys
from typing import Optional


class CodecError(ValueError):
    """A frame could not be encoded or decoded."""


class PacketTooLargeError(CodecError):
    """A frame header announces more data than the codec accepts."""


_MAX_FRAME = 0x3FFFFFFF


class BytesCodec:
    """Encode and decode frames.

    The header's low two bits give its length minus one; the remaining bits,
    little-endian, give the payload length. In raw mode data passes through
    unframed.
    """

    def __init__(self, raw: bool = False, max_packet_length: Optional[int] = None) -> None:
        self.raw = raw
        self.max_packet_length = sys.maxsize if max_packet_length is None else max_packet_length
        self._pending: Optional[int] = None

    def _decode_head(self, buffer: bytearray) -> Optional[int]:
        if not buffer:
            return None
        head_len = (buffer[0] & 0x3) + 1
        if len(buffer) < head_len:
            return None
        n = int.from_bytes(buffer[:head_len], "little") >> 2
        if n > self.max_packet_length:
            raise PacketTooLargeError("Too big packet")
        del buffer[:head_len]
        return n

    def decode(self, buffer: bytearray) -> Optional[bytes]:
        """Take one frame's payload from the front of ``buffer``.

        Returns ``None`` when the buffer does not yet hold a whole frame; the
        bytes consumed so far are remembered for the next call.
        """
        if self.raw:
            if not buffer:
                return None
            data = bytes(buffer)
            buffer.clear()
            return data
        if self._pending is None:
            n = self._decode_head(buffer)
            if n is None:
                return None
            self._pending = n
        n = self._pending
        if len(buffer) < n:
            return None
        data = bytes(buffer[:n])
        del buffer[:n]
        self._pending = None
        return data

    def encode(self, data: bytes) -> bytes:
        """Return ``data`` with its frame header, or unchanged in raw mode."""
        if self.raw:
            return bytes(data)
        size = len(data)
        if size <= 0x3F:
            head = (size << 2).to_bytes(1, "little")
        elif size <= 0x3FFF:
            head = ((size << 2) | 0x1).to_bytes(2, "little")
        elif size <= 0x3FFFFF:
            head = ((size << 2) | 0x2).to_bytes(3, "little")
        elif size <= _MAX_FRAME:
            head = ((size << 2) | 0x3).to_bytes(4, "little")
        else:
            raise CodecError("Overflow")
        return head + bytes(data)