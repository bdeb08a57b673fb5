"""Ingestion layer: stream names, transports and the WebSocket client."""
from .events import CombinedStreamEvent
from .transport import DirectConnection, ProxiedConnection, open_connection
from .ws_client import BinanceWebSocketClient

__all__ = [
    "BinanceWebSocketClient",
    "CombinedStreamEvent",
    "DirectConnection",
    "ProxiedConnection",
    "open_connection",
]
