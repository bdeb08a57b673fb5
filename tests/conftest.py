import pytest
from websockets.datastructures import Headers
from websockets.exceptions import ConnectionClosedOK
from websockets.http11 import Response

from binance_stream.ingestion import transport


class FakeConnection:
    """Stand-in for websockets' ClientConnection fed from a message list."""

    def __init__(self, messages=(), close_error=None):
        self.messages = list(messages)
        self.close_error = close_error
        self.closed = False
        self.response = Response(
            101, "Switching Protocols", Headers({"Upgrade": "websocket"})
        )
        self.remote_address = ("127.0.0.1", 9443)

    async def recv(self):
        if not self.messages:
            raise ConnectionClosedOK(None, None)
        item = self.messages.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self):
        if self.close_error is not None:
            raise self.close_error
        self.closed = True


class FakeSocket:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class FakeWire:
    """Records the proxy tunnel and handshake calls made by open_connection."""

    def __init__(self):
        self.calls = []
        self.messages = []
        self.handshake_kwargs = {}
        self.handshake_error = None
        self.proxy_error = None
        self.close_error = None
        self.connections = []
        self.sockets = []

    async def connect(self, uri, **kwargs):
        self.calls.append(("handshake", uri))
        self.handshake_kwargs = kwargs
        if self.handshake_error is not None:
            raise self.handshake_error
        conn = FakeConnection(self.messages, close_error=self.close_error)
        self.connections.append(conn)
        return conn

    def proxy_class(self):
        wire = self

        class FakeProxy:
            def __init__(self, url):
                self.url = url

            @classmethod
            def from_url(cls, url):
                wire.calls.append(("proxy", url))
                return cls(url)

            async def connect(self, dest_host, dest_port):
                wire.calls.append(("tunnel", dest_host, dest_port))
                if wire.proxy_error is not None:
                    raise wire.proxy_error
                sock = FakeSocket()
                wire.sockets.append(sock)
                return sock

        return FakeProxy


@pytest.fixture
def wire(monkeypatch):
    fake = FakeWire()
    monkeypatch.setattr(transport, "connect", fake.connect)
    monkeypatch.setattr(transport, "Proxy", fake.proxy_class())
    return fake


@pytest.fixture
def fake_connection():
    return FakeConnection
