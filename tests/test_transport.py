import asyncio

import pytest
from python_socks import ProxyConnectionError
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK
from websockets.frames import Close

from binance_stream.errors import (
    HandshakeError,
    ProxyConnectError,
    TransportError,
    UrlParseError,
)
from binance_stream.ingestion.transport import (
    DirectConnection,
    FrameKind,
    ProxiedConnection,
    normalize_proxy_url,
    open_connection,
)

URL = "wss://stream.binance.com:9443/ws/btcusdt@trade"


def test_direct_connection_skips_proxy(wire):
    conn = asyncio.run(open_connection(URL, open_timeout=5))

    assert isinstance(conn, DirectConnection)
    assert conn.kind == "direct"
    assert wire.calls == [("handshake", URL)]
    assert wire.handshake_kwargs["proxy"] is None
    assert wire.handshake_kwargs["open_timeout"] == 5
    assert "sock" not in wire.handshake_kwargs
    assert conn.status_code == 101


def test_proxied_connection_tunnels_before_handshake(wire):
    conn = asyncio.run(open_connection(URL, proxy_url="socks5://127.0.0.1:1080"))

    assert isinstance(conn, ProxiedConnection)
    assert conn.proxy_url == "socks5://127.0.0.1:1080"
    assert wire.calls == [
        ("proxy", "socks5://127.0.0.1:1080"),
        ("tunnel", "stream.binance.com", 9443),
        ("handshake", URL),
    ]
    assert wire.handshake_kwargs["sock"] is wire.sockets[0]
    assert wire.handshake_kwargs["proxy"] is None


def test_proxied_connection_uses_default_port(wire):
    asyncio.run(open_connection("wss://example.com/ws/x", proxy_url="10.0.0.1:1080"))

    assert wire.calls[0] == ("proxy", "socks5://10.0.0.1:1080")
    assert wire.calls[1] == ("tunnel", "example.com", 443)


def test_non_socks_proxy_rejected(wire):
    with pytest.raises(ProxyConnectError):
        asyncio.run(open_connection(URL, proxy_url="http://127.0.0.1:8080"))
    assert wire.calls == []


def test_proxy_failure_skips_handshake(wire):
    wire.proxy_error = ProxyConnectionError("connection refused")

    with pytest.raises(ProxyConnectError, match="connection refused"):
        asyncio.run(open_connection(URL, proxy_url="socks5://127.0.0.1:1080"))
    assert [call[0] for call in wire.calls] == ["proxy", "tunnel"]


def test_handshake_failure_over_proxy_closes_tunnel(wire):
    wire.handshake_error = OSError("tls failure")

    with pytest.raises(HandshakeError, match="tls failure") as excinfo:
        asyncio.run(open_connection(URL, proxy_url="socks5://127.0.0.1:1080"))
    assert isinstance(excinfo.value.__cause__, OSError)
    assert wire.sockets[0].closed


def test_direct_handshake_failure(wire):
    wire.handshake_error = OSError("name resolution failed")

    with pytest.raises(HandshakeError, match="name resolution failed"):
        asyncio.run(open_connection(URL))


def test_invalid_url_rejected_before_connecting(wire):
    with pytest.raises(UrlParseError):
        asyncio.run(open_connection("https://stream.binance.com/ws/x"))
    assert wire.calls == []


def test_normalize_proxy_url():
    assert normalize_proxy_url("127.0.0.1:1080") == "socks5://127.0.0.1:1080"
    assert normalize_proxy_url("socks5://u:p@host:1") == "socks5://u:p@host:1"


def test_next_frame_translates_messages(fake_connection):
    conn = fake_connection([
        '{"e":"trade"}',
        b"\x00\x01",
        ConnectionClosedOK(Close(1000, "bye"), None),
    ])
    socket = DirectConnection(conn, conn.response)

    async def read_all():
        return [await socket.next_frame() for _ in range(3)]

    text, binary, close = asyncio.run(read_all())
    assert text.kind is FrameKind.TEXT and text.data == '{"e":"trade"}'
    assert binary.kind is FrameKind.BINARY and binary.data == b"\x00\x01"
    assert close.kind is FrameKind.CLOSE
    assert (close.code, close.reason) == (1000, "bye")


def test_next_frame_end_of_stream(fake_connection):
    conn = fake_connection([])
    socket = DirectConnection(conn, conn.response)

    assert asyncio.run(socket.next_frame()) is None


def test_next_frame_abnormal_close(fake_connection):
    conn = fake_connection([ConnectionClosedError(None, None)])
    socket = DirectConnection(conn, conn.response)

    with pytest.raises(TransportError):
        asyncio.run(socket.next_frame())


def test_close_failure_surfaces(fake_connection):
    conn = fake_connection(close_error=OSError("broken pipe"))
    socket = DirectConnection(conn, conn.response)

    with pytest.raises(TransportError, match="broken pipe"):
        asyncio.run(socket.close())
