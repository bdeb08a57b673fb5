"""Exception hierarchy raised by the streaming client."""
from __future__ import annotations
from typing import Optional


class BinanceStreamError(Exception):
    """Base exception for all streaming client errors."""
    pass


class UrlParseError(BinanceStreamError):
    """Raised when an endpoint URL is not a valid WebSocket URI."""
    pass


class ProxyConnectError(BinanceStreamError):
    """Raised when the SOCKS5 tunnel to the target host cannot be opened."""
    pass


class HandshakeError(BinanceStreamError):
    """Raised when the WebSocket or TLS handshake fails."""
    pass


class TransportError(BinanceStreamError):
    """Raised when reading from or closing an open connection fails."""
    pass


class DecodeError(BinanceStreamError):
    """
    Raised when a text frame cannot be decoded into the event type.

    Attributes:
        payload: Raw text frame that failed to decode
    """
    def __init__(self, message: str, payload: str = "") -> None:
        super().__init__(message)
        self.payload = payload


class HandlerError(BinanceStreamError):
    """Raised by event handlers to report a failure to the event loop."""
    pass


class DisconnectedError(BinanceStreamError):
    """
    Raised when the server closes the stream.

    Attributes:
        code: Close code from the remote close frame, if one was received
        reason: Close reason from the remote close frame
    """
    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        reason: str = "",
    ) -> None:
        super().__init__(message)
        self.code = code
        self.reason = reason


class NotConnectedError(BinanceStreamError):
    """Raised when disconnect is called without an active connection."""
    pass


__all__ = [
    "BinanceStreamError",
    "DecodeError",
    "DisconnectedError",
    "HandlerError",
    "HandshakeError",
    "NotConnectedError",
    "ProxyConnectError",
    "TransportError",
    "UrlParseError",
]
