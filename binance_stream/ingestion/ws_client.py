"""
Async Binance WebSocket stream client.

Opens a single stream or a combined multi-stream connection, directly or
through a SOCKS5 proxy, then decodes every JSON text frame and hands it
to a synchronous handler until cancelled or the stream fails.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Any, Callable, Iterable, Optional, Protocol
from urllib.parse import urlsplit, urlunsplit

from binance_stream.config import StreamConfig
from binance_stream.errors import (
    DisconnectedError,
    NotConnectedError,
    TransportError,
)
from .events import decode_event, event_adapter
from .streams import STREAM_ENDPOINT, WS_ENDPOINT, combined_stream
from .transport import Frame, FrameKind, WebSocketConnection, open_connection

EventHandler = Callable[[Any], None]
LOGGER = logging.getLogger(__name__)


class RunningFlag(Protocol):
    """Externally owned flag; the event loop runs while it is set."""
    def is_set(self) -> bool: ...


class BinanceWebSocketClient:
    """
    WebSocket client for Binance market and account streams.

    Holds at most one connection. Frames are processed strictly in arrival
    order and the handler is never invoked concurrently. There is no
    reconnection: every failure stops the loop and is raised to the caller.

    Attributes:
        handler: Callable invoked with each decoded event; raising stops
            the event loop and the exception propagates unchanged
        config: Endpoint, proxy and transport settings
        event_type: Decode target for text frames (any type pydantic's
            TypeAdapter accepts; Any yields plain JSON values)
    """
    def __init__(
        self,
        handler: EventHandler,
        config: Optional[StreamConfig] = None,
        event_type: Any = Any,
    ) -> None:
        self.handler = handler
        self.config = config or StreamConfig()
        self.event_type = event_type
        self._adapter = event_adapter(event_type)
        self._socket: Optional[WebSocketConnection] = None

    @property
    def socket(self) -> Optional[WebSocketConnection]:
        """Current connection, or None when not connected."""
        return self._socket

    def endpoint_url(self, endpoint: str) -> str:
        """URL of a single raw stream: <base>/ws/<endpoint>."""
        return f"{self.config.ws_endpoint}/{WS_ENDPOINT}/{endpoint}"

    def combined_url(self, streams: Iterable[str]) -> str:
        """URL of a combined stream: <base>/stream?streams=<a>/<b>/..."""
        parts = urlsplit(self.config.ws_endpoint)
        path = f"{parts.path.rstrip('/')}/{STREAM_ENDPOINT}"
        query = f"streams={combined_stream(streams)}"
        return urlunsplit((parts.scheme, parts.netloc, path, query, ""))

    async def connect(self, endpoint: str) -> None:
        """
        Connect to a single stream endpoint.

        Args:
            endpoint: Topic or listen key, e.g. "btcusdt@trade"
        """
        await self._handle_connect(self.endpoint_url(endpoint))

    async def connect_multiple(self, streams: Iterable[str]) -> None:
        """
        Connect to several streams over one combined connection.

        Payloads arrive wrapped as {"stream": ..., "data": ...}; use
        CombinedStreamEvent[...] as event_type to decode them.

        Args:
            streams: Topic names, joined in the given order
        """
        await self._handle_connect(self.combined_url(streams))

    async def _handle_connect(self, url: str) -> None:
        previous = self._socket
        self._socket = await open_connection(
            url,
            proxy_url=self.config.proxy_url,
            **self.config.connect_kwargs(),
        )
        LOGGER.info("Connected to %s (%s)", url, self._socket.kind)
        if previous is not None:
            LOGGER.info("Closing replaced %s connection", previous.kind)
            try:
                await previous.close()
            except TransportError as exc:
                LOGGER.warning("Error closing replaced connection: %s", exc)

    async def disconnect(self) -> None:
        """
        Close the held connection and release it.

        Raises:
            NotConnectedError: No connection is held
            TransportError: The closing handshake failed
        """
        socket = self._socket
        if socket is None:
            raise NotConnectedError("Not able to close the connection")
        self._socket = None
        await socket.close()
        LOGGER.info("Disconnected %s connection", socket.kind)

    def process_message(self, frame: Frame) -> None:
        """
        Decode one frame and dispatch it to the handler.

        Empty text and non-text frames are ignored.

        Raises:
            DecodeError: Text payload does not decode into event_type
            DisconnectedError: Frame is a close frame
        """
        if frame.kind is FrameKind.TEXT:
            if not frame.data:
                return
            event = decode_event(self._adapter, frame.data)
            self.handler(event)
        elif frame.kind is FrameKind.CLOSE:
            LOGGER.warning(
                "Server closed stream: code=%s reason=%r",
                frame.code, frame.reason,
            )
            raise DisconnectedError(
                f"Disconnected (code={frame.code}, reason={frame.reason!r})",
                code=frame.code,
                reason=frame.reason,
            )
        else:
            LOGGER.debug("Ignoring %s frame", frame.kind.value)

    async def event_loop(self, running: RunningFlag) -> None:
        """
        Read, decode and dispatch frames while running is set.

        The flag is checked once per iteration before waiting for the next
        frame, so clearing it does not interrupt a read already in flight.
        Pair with a transport timeout or task cancellation if a hard stop
        is required.

        Args:
            running: threading.Event, asyncio.Event or anything with is_set()

        Raises:
            DisconnectedError: Close frame received or stream ended
            TransportError: Reading from the connection failed
            DecodeError: A text frame failed to decode
            Exception: Whatever the handler raised, unchanged
        """
        while running.is_set():
            socket = self._socket
            if socket is None:
                await asyncio.sleep(0)
                continue
            frame = await socket.next_frame()
            if frame is None:
                raise DisconnectedError("Disconnected: stream ended")
            self.process_message(frame)

    async def __aenter__(self) -> BinanceWebSocketClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if self._socket is not None:
            await self.disconnect()


__all__ = ["BinanceWebSocketClient", "EventHandler", "RunningFlag"]
