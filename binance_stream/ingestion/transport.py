"""
WebSocket transports for Binance streams.

A connection is either direct (plain TCP, TLS when the scheme is wss) or
tunneled through a SOCKS5 proxy. Both variants expose the same two
operations, close() and next_frame(), so the event loop never sees the
underlying stream type.
"""
from __future__ import annotations
import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Union
from urllib.parse import urlsplit

from python_socks import ProxyConnectionError, ProxyError, ProxyTimeoutError
from python_socks.async_.asyncio import Proxy
from websockets.asyncio.client import ClientConnection, connect
from websockets.datastructures import Headers
from websockets.exceptions import (
    ConnectionClosed,
    ConnectionClosedOK,
    InvalidURI,
    WebSocketException,
)
from websockets.http11 import Response
from websockets.uri import WebSocketURI, parse_uri

from binance_stream.errors import (
    HandshakeError,
    ProxyConnectError,
    TransportError,
    UrlParseError,
)

LOGGER = logging.getLogger(__name__)
SOCKS5_SCHEME = "socks5"

HANDSHAKE_ERRORS = (WebSocketException, OSError, asyncio.TimeoutError)
PROXY_ERRORS = (
    ProxyError,
    ProxyConnectionError,
    ProxyTimeoutError,
    OSError,
    asyncio.TimeoutError,
)


class FrameKind(enum.Enum):
    TEXT = "text"
    BINARY = "binary"
    PING = "ping"
    PONG = "pong"
    CLOSE = "close"


@dataclass(frozen=True)
class Frame:
    """One inbound WebSocket message."""

    kind: FrameKind
    data: Union[str, bytes] = ""
    code: Optional[int] = None
    reason: str = ""

    @classmethod
    def text(cls, data: str) -> Frame:
        return cls(FrameKind.TEXT, data)

    @classmethod
    def binary(cls, data: bytes) -> Frame:
        return cls(FrameKind.BINARY, data)

    @classmethod
    def close(cls, code: Optional[int] = None, reason: str = "") -> Frame:
        return cls(FrameKind.CLOSE, b"", code=code, reason=reason)


class WebSocketConnection:
    """
    Open WebSocket session plus the handshake response that created it.

    Only DirectConnection and ProxiedConnection are instantiated; both
    are built from a completed handshake, never partially.

    Attributes:
        connection: websockets client connection
        response: HTTP response to the opening handshake
    """
    kind: ClassVar[str] = ""

    def __init__(self, connection: ClientConnection, response: Response) -> None:
        self.connection = connection
        self.response = response

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def headers(self) -> Headers:
        return self.response.headers

    @property
    def remote_address(self) -> Any:
        return self.connection.remote_address

    async def close(self) -> None:
        """
        Close the session gracefully and wait for the socket to shut down.

        Raises:
            TransportError: The closing handshake failed
        """
        try:
            await self.connection.close()
        except (WebSocketException, OSError) as exc:
            raise TransportError(f"Error closing connection: {exc}") from exc

    async def next_frame(self) -> Optional[Frame]:
        """
        Wait for the next inbound message.

        Ping and pong frames are answered inside websockets and never
        reach this method.

        Returns:
            The next Frame; a CLOSE frame once the server's close frame
            arrives; None when the stream ended cleanly without one

        Raises:
            TransportError: The connection dropped abnormally
        """
        try:
            message = await self.connection.recv()
        except ConnectionClosed as exc:
            if exc.rcvd is not None:
                return Frame.close(exc.rcvd.code, exc.rcvd.reason)
            if isinstance(exc, ConnectionClosedOK):
                return None
            raise TransportError(f"Connection lost: {exc}") from exc
        if isinstance(message, str):
            return Frame.text(message)
        return Frame.binary(message)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(remote={self.remote_address!r}, "
            f"status={self.status_code})"
        )


class DirectConnection(WebSocketConnection):
    """Session over a plain or TLS-wrapped TCP connection."""
    kind = "direct"


class ProxiedConnection(WebSocketConnection):
    """
    Session carried through a SOCKS5 tunnel.

    Attributes:
        proxy_url: Proxy the tunnel was opened through
    """
    kind = "proxied"

    def __init__(
        self,
        connection: ClientConnection,
        response: Response,
        proxy_url: str,
    ) -> None:
        super().__init__(connection, response)
        self.proxy_url = proxy_url


def parse_ws_url(url: str) -> WebSocketURI:
    """
    Validate a ws:// or wss:// URL.

    Raises:
        UrlParseError: URL is not a WebSocket URI
    """
    try:
        return parse_uri(url)
    except InvalidURI as exc:
        raise UrlParseError(f"Invalid WebSocket URL {url!r}: {exc}") from exc


def normalize_proxy_url(proxy_url: str) -> str:
    """
    Return proxy_url as a socks5:// URL.

    Bare "host:port" addresses are accepted and assumed to be SOCKS5.

    Raises:
        ProxyConnectError: URL names a scheme other than socks5
    """
    if "://" not in proxy_url:
        return f"{SOCKS5_SCHEME}://{proxy_url}"
    scheme = urlsplit(proxy_url).scheme.lower()
    if scheme != SOCKS5_SCHEME:
        raise ProxyConnectError(
            f"Unsupported proxy scheme {scheme!r}; only socks5 is supported"
        )
    return proxy_url


async def open_connection(
    url: str,
    proxy_url: Optional[str] = None,
    **connect_kwargs: Any,
) -> WebSocketConnection:
    """
    Open a WebSocket session, through a SOCKS5 proxy when one is given.

    Args:
        url: Target ws:// or wss:// URL
        proxy_url: SOCKS5 proxy address, None for a direct connection
        **connect_kwargs: Extra arguments for websockets' connect()

    Returns:
        DirectConnection or ProxiedConnection

    Raises:
        UrlParseError: url is not a WebSocket URI
        ProxyConnectError: SOCKS5 tunnel could not be established
        HandshakeError: WebSocket/TLS handshake failed
    """
    wsuri = parse_ws_url(url)
    if proxy_url is None:
        return await _open_direct(url, **connect_kwargs)
    return await _open_proxied(url, wsuri, proxy_url, **connect_kwargs)


async def _open_direct(url: str, **connect_kwargs: Any) -> DirectConnection:
    LOGGER.info("Connecting to %s", url)
    try:
        ws = await connect(url, proxy=None, **connect_kwargs)
    except HANDSHAKE_ERRORS as exc:
        LOGGER.warning("Handshake with %s failed: %s", url, exc)
        raise HandshakeError(f"Error during handshake: {exc}") from exc
    return DirectConnection(ws, ws.response)


async def _open_proxied(
    url: str,
    wsuri: WebSocketURI,
    proxy_url: str,
    **connect_kwargs: Any,
) -> ProxiedConnection:
    proxy_url = normalize_proxy_url(proxy_url)
    LOGGER.info("Connecting to %s via proxy %s", url, proxy_url)
    try:
        proxy = Proxy.from_url(proxy_url)
        sock = await proxy.connect(dest_host=wsuri.host, dest_port=wsuri.port)
    except ValueError as exc:
        raise ProxyConnectError(
            f"Invalid proxy address {proxy_url!r}: {exc}"
        ) from exc
    except PROXY_ERRORS as exc:
        LOGGER.warning("Proxy %s failed: %s", proxy_url, exc)
        raise ProxyConnectError(f"Error creating proxy stream: {exc}") from exc
    try:
        ws = await connect(url, sock=sock, proxy=None, **connect_kwargs)
    except HANDSHAKE_ERRORS as exc:
        sock.close()
        LOGGER.warning("Handshake with %s over proxy failed: %s", url, exc)
        raise HandshakeError(f"Error during handshake: {exc}") from exc
    return ProxiedConnection(ws, ws.response, proxy_url)


__all__ = [
    "DirectConnection",
    "Frame",
    "FrameKind",
    "ProxiedConnection",
    "WebSocketConnection",
    "normalize_proxy_url",
    "open_connection",
    "parse_ws_url",
]
