"""UDP sockets that send and receive whole datagrams on top of asyncio."""

from __future__ import annotations

import asyncio
import socket
from typing import Any, Optional, Union

Address = tuple

_CLOSED = object()


class _Protocol(asyncio.DatagramProtocol):
    def __init__(self, queue: "asyncio.Queue[Any]") -> None:
        self._queue = queue

    def datagram_received(self, data: bytes, addr: Address) -> None:
        self._queue.put_nowait((bytes(data), tuple(addr[:2])))

    def error_received(self, exc: Exception) -> None:
        self._queue.put_nowait(exc)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        if exc is not None:
            self._queue.put_nowait(exc)
        self._queue.put_nowait(_CLOSED)


def _new_socket(family: int, address: Any, reuse: bool) -> socket.socket:
    sock = socket.socket(family, socket.SOCK_DGRAM)
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


class FramedSocket:
    """A bound UDP socket; each message is one datagram."""

    def __init__(self, transport: asyncio.DatagramTransport, queue: "asyncio.Queue[Any]") -> None:
        self._transport = transport
        self._queue = queue

    @classmethod
    async def _from(cls, **kwargs: Any) -> "FramedSocket":
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[Any] = asyncio.Queue()
        transport, _ = await loop.create_datagram_endpoint(lambda: _Protocol(queue), **kwargs)
        return cls(transport, queue)

    @classmethod
    async def create(cls, addr: Address) -> "FramedSocket":
        """Bind a new socket to ``addr`` (``(host, port)``)."""
        return await cls._from(local_addr=tuple(addr))

    @classmethod
    async def create_reuse(cls, addr: Address) -> "FramedSocket":
        """Bind to the first resolved address of ``addr`` with address and port reuse."""
        infos = socket.getaddrinfo(addr[0], addr[1], type=socket.SOCK_DGRAM)
        if not infos:
            raise OSError("could not resolve to any address")
        family, _, _, _, sockaddr = infos[0]
        sock = _new_socket(family, sockaddr, True)
        try:
            return await cls._from(sock=sock)
        except BaseException:
            sock.close()
            raise

    def local_address(self) -> Address:
        """Return the ``(host, port)`` the socket is bound to."""
        return tuple(self._transport.get_extra_info("sockname")[:2])

    async def send(self, msg: Any, addr: Address) -> None:
        """Serialize a protobuf message and send it to ``addr``."""
        await self.send_raw(msg.SerializeToString(), addr)

    async def send_raw(self, data: Union[bytes, bytearray], addr: Address) -> None:
        """Send ``data`` as one datagram to ``addr``."""
        self._transport.sendto(bytes(data), tuple(addr))

    async def next(self) -> Optional[tuple[bytes, Address]]:
        """Return the next ``(data, sender)`` pair, or ``None`` once the socket is closed."""
        item = await self._queue.get()
        if item is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            return None
        if isinstance(item, Exception):
            raise item
        return item

    async def next_timeout(self, ms: int) -> Optional[tuple[bytes, Address]]:
        """Like :meth:`next`, but return ``None`` if nothing arrives within ``ms`` milliseconds."""
        try:
            return await asyncio.wait_for(self.next(), ms / 1000)
        except asyncio.TimeoutError:
            return None

    def close(self) -> None:
        """Close the socket."""
        self._transport.close()

    async def __aenter__(self) -> "FramedSocket":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()