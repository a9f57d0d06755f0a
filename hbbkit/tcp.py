"""Framed, optionally encrypted TCP streams on top of asyncio."""

from __future__ import annotations

import asyncio
import socket
from typing import Any, Awaitable, Callable, Optional

import nacl.exceptions
import nacl.secret

from .bytes_codec import BytesCodec

DEFAULT_BACKLOG = 128
NONCE_SIZE = nacl.secret.SecretBox.NONCE_SIZE
KEY_SIZE = nacl.secret.SecretBox.KEY_SIZE
_READ_SIZE = 64 * 1024

Address = tuple


def get_nonce(seqnum: int) -> bytes:
    """Return the secretbox nonce for a message sequence number."""
    return seqnum.to_bytes(8, "little").ljust(NONCE_SIZE, b"\x00")


def _new_socket(family: int, address: Any, reuse: bool) -> socket.socket:
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        if reuse:
            if hasattr(socket, "SO_REUSEPORT"):
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(address)
    except OSError:
        sock.close()
        raise
    sock.setblocking(False)
    return sock


class FramedStream:
    """A TCP stream carrying length-prefixed frames, optionally sealed with secretbox."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._reader = reader
        self._writer = writer
        self._codec = BytesCodec()
        self._buffer = bytearray()
        self._box: Optional[nacl.secret.SecretBox] = None
        self._send_seq = 0
        self._recv_seq = 0

    @classmethod
    async def connect(
        cls, remote_addr: Address, local_addr: Address, ms_timeout: int
    ) -> "FramedStream":
        """Connect from ``local_addr`` (bound with address reuse) to ``remote_addr``.

        Raises :class:`TimeoutError` if the connection takes longer than
        ``ms_timeout`` milliseconds.
        """
        loop = asyncio.get_running_loop()
        local_infos = await loop.getaddrinfo(*local_addr[:2], type=socket.SOCK_STREAM)
        remote_infos = await loop.getaddrinfo(*remote_addr[:2], type=socket.SOCK_STREAM)
        if not local_infos or not remote_infos:
            raise OSError("could not resolve to any address")
        family, _, _, _, local_sockaddr = local_infos[0]
        remote_sockaddr = remote_infos[0][4]
        sock = _new_socket(family, local_sockaddr, True)
        try:
            await asyncio.wait_for(loop.sock_connect(sock, remote_sockaddr), ms_timeout / 1000)
        except BaseException:
            sock.close()
            raise
        reader, writer = await asyncio.open_connection(sock=sock)
        return cls(reader, writer)

    def set_raw(self) -> None:
        """Stop framing and encrypting; bytes pass through as they are."""
        self._codec.raw = True
        self._box = None

    def set_key(self, key: bytes) -> None:
        """Encrypt every following message with the 32-byte secretbox ``key``."""
        if len(key) != KEY_SIZE:
            raise ValueError(f"key must be {KEY_SIZE} bytes, got {len(key)}")
        self._box = nacl.secret.SecretBox(bytes(key))
        self._send_seq = 0
        self._recv_seq = 0

    def is_secured(self) -> bool:
        """Tell whether messages are encrypted."""
        return self._box is not None

    async def send(self, msg: Any) -> None:
        """Serialize a protobuf message and send it."""
        await self.send_raw(msg.SerializeToString())

    async def send_raw(self, data: bytes) -> None:
        """Send one message, encrypting it if a key is set."""
        payload = bytes(data)
        if self._box is not None:
            self._send_seq += 1
            payload = self._box.encrypt(payload, get_nonce(self._send_seq)).ciphertext
        await self._write(self._codec.encode(payload))

    async def send_bytes(self, data: bytes) -> None:
        """Send one frame without encrypting it."""
        await self._write(self._codec.encode(data))

    async def _write(self, frame: bytes) -> None:
        self._writer.write(frame)
        await self._writer.drain()

    def _open(self, frame: bytes) -> bytes:
        if self._box is None:
            return frame
        self._recv_seq += 1
        try:
            return self._box.decrypt(frame, get_nonce(self._recv_seq))
        except nacl.exceptions.CryptoError as err:
            raise OSError("decryption error") from err

    async def next(self) -> Optional[bytes]:
        """Return the next message, or ``None`` once the peer has closed the stream."""
        while True:
            frame = self._codec.decode(self._buffer)
            if frame is not None:
                return self._open(frame)
            chunk = await self._reader.read(_READ_SIZE)
            if not chunk:
                if self._buffer:
                    raise ConnectionError("bytes remaining on stream")
                return None
            self._buffer += chunk

    async def next_timeout(self, ms: int) -> Optional[bytes]:
        """Like :meth:`next`, but return ``None`` if nothing arrives within ``ms`` milliseconds."""
        try:
            return await asyncio.wait_for(self.next(), ms / 1000)
        except asyncio.TimeoutError:
            return None

    async def close(self) -> None:
        """Close the stream."""
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except OSError:
            pass

    async def __aenter__(self) -> "FramedStream":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


async def new_listener(
    host: Optional[str],
    port: int,
    reuse: bool,
    handler: Callable[[FramedStream], Awaitable[None]],
) -> asyncio.AbstractServer:
    """Listen on ``host:port`` and call ``handler`` with a :class:`FramedStream` per connection.

    With ``reuse`` the first resolved address is bound with address (and,
    where available, port) reuse.
    """

    async def on_connect(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        await handler(FramedStream(reader, writer))

    if not reuse:
        return await asyncio.start_server(on_connect, host, port)
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(host, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE)
    if not infos:
        raise OSError("could not resolve to any address")
    family, _, _, _, sockaddr = infos[0]
    sock = _new_socket(family, sockaddr, True)
    try:
        sock.listen(DEFAULT_BACKLOG)
        return await asyncio.start_server(on_connect, sock=sock)
    except BaseException:
        sock.close()
        raise