import asyncio

import pytest

from hbbkit.udp import FramedSocket


class _Message:
    def __init__(self, payload):
        self.payload = payload

    def SerializeToString(self):
        return self.payload


@pytest.mark.asyncio
async def test_send_and_receive_raw():
    async with await FramedSocket.create(("127.0.0.1", 0)) as a:
        async with await FramedSocket.create(("127.0.0.1", 0)) as b:
            await a.send_raw(b"ping", b.local_address())
            data, sender = await asyncio.wait_for(b.next(), 2)
            assert data == b"ping"
            assert sender == a.local_address()


@pytest.mark.asyncio
async def test_local_address_is_bound_host():
    async with await FramedSocket.create(("127.0.0.1", 0)) as sock:
        host, port = sock.local_address()
        assert host == "127.0.0.1"
        assert port > 0


@pytest.mark.asyncio
async def test_send_message():
    async with await FramedSocket.create(("127.0.0.1", 0)) as a:
        async with await FramedSocket.create(("127.0.0.1", 0)) as b:
            await a.send(_Message(b"payload"), b.local_address())
            data, _ = await asyncio.wait_for(b.next(), 2)
            assert data == b"payload"


@pytest.mark.asyncio
async def test_create_reuse_round_trip():
    async with await FramedSocket.create_reuse(("127.0.0.1", 0)) as a:
        async with await FramedSocket.create_reuse(("127.0.0.1", 0)) as b:
            await b.send_raw(b"pong", a.local_address())
            result = await a.next_timeout(2000)
            assert result == (b"pong", b.local_address())


@pytest.mark.asyncio
async def test_datagrams_keep_boundaries():
    async with await FramedSocket.create(("127.0.0.1", 0)) as a:
        async with await FramedSocket.create(("127.0.0.1", 0)) as b:
            for chunk in (b"one", b"two"):
                await a.send_raw(chunk, b.local_address())
            first = await asyncio.wait_for(b.next(), 2)
            second = await asyncio.wait_for(b.next(), 2)
            assert [first[0], second[0]] == [b"one", b"two"]


@pytest.mark.asyncio
async def test_next_timeout_returns_none():
    async with await FramedSocket.create(("127.0.0.1", 0)) as sock:
        assert await sock.next_timeout(50) is None


@pytest.mark.asyncio
async def test_next_after_close_returns_none():
    sock = await FramedSocket.create(("127.0.0.1", 0))
    sock.close()
    assert await asyncio.wait_for(sock.next(), 2) is None
    assert await asyncio.wait_for(sock.next(), 2) is None