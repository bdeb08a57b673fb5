"""
Binance stream topic names.

Pure helpers producing the topic identifiers accepted by the stream
endpoint. Parameters are formatted as given; callers are expected to pass
lowercase symbols and supported levels/intervals.
"""
from __future__ import annotations
from typing import Iterable

WS_ENDPOINT = "ws"
STREAM_ENDPOINT = "stream"

# Event type discriminators ("e" field, or "lastUpdateId" for depth snapshots)
OUTBOUND_ACCOUNT_INFO = "outboundAccountInfo"
OUTBOUND_ACCOUNT_POSITION = "outboundAccountPosition"
EXECUTION_REPORT = "executionReport"
KLINE = "kline"
AGGREGATED_TRADE = "aggTrade"
DEPTH_ORDERBOOK = "depthUpdate"
PARTIAL_ORDERBOOK = "lastUpdateId"
DAYTICKER = "24hrTicker"


def all_ticker_stream() -> str:
    return "!ticker@arr"


def ticker_stream(symbol: str) -> str:
    return f"{symbol}@ticker"


def mini_ticker_stream(symbol: str) -> str:
    return f"{symbol}@miniTicker"


def all_mini_ticker_stream() -> str:
    return "!miniTicker@arr"


def agg_trade_stream(symbol: str) -> str:
    return f"{symbol}@aggTrade"


def trade_stream(symbol: str) -> str:
    return f"{symbol}@trade"


def kline_stream(symbol: str, interval: str) -> str:
    return f"{symbol}@kline_{interval}"


def book_ticker_stream(symbol: str) -> str:
    return f"{symbol}@bookTicker"


def all_book_ticker_stream() -> str:
    return "!bookTicker"


def partial_book_depth_stream(
    symbol: str, levels: int, update_speed: int
) -> str:
    """
    Top-of-book snapshot stream.

    Args:
        symbol: Market symbol, e.g. "btcusdt"
        levels: 5, 10 or 20
        update_speed: 1000 or 100 (milliseconds)
    """
    return f"{symbol}@depth{levels}@{update_speed}ms"


def diff_book_depth_stream(symbol: str, update_speed: int) -> str:
    """
    Incremental order book update stream.

    Args:
        symbol: Market symbol, e.g. "btcusdt"
        update_speed: 1000 or 100 (milliseconds)
    """
    return f"{symbol}@depth@{update_speed}ms"


def combined_stream(streams: Iterable[str]) -> str:
    """Join topics into one multi-stream path, keeping caller order."""
    return "/".join(streams)


__all__ = [
    "AGGREGATED_TRADE",
    "DAYTICKER",
    "DEPTH_ORDERBOOK",
    "EXECUTION_REPORT",
    "KLINE",
    "OUTBOUND_ACCOUNT_INFO",
    "OUTBOUND_ACCOUNT_POSITION",
    "PARTIAL_ORDERBOOK",
    "STREAM_ENDPOINT",
    "WS_ENDPOINT",
    "agg_trade_stream",
    "all_book_ticker_stream",
    "all_mini_ticker_stream",
    "all_ticker_stream",
    "book_ticker_stream",
    "combined_stream",
    "diff_book_depth_stream",
    "kline_stream",
    "mini_ticker_stream",
    "partial_book_depth_stream",
    "ticker_stream",
    "trade_stream",
]
