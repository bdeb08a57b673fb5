"""
CLI demo: subscribe to streams and print each event as a JSON line.
"""
from __future__ import annotations
import argparse
import asyncio
import json
import logging
import signal
import sys
from typing import Any, Callable, Dict, List, Optional, TextIO

from pydantic import BaseModel

from binance_stream.config import StreamConfig, ensure_env_loaded
from binance_stream.errors import BinanceStreamError
from binance_stream.ingestion import BinanceWebSocketClient, CombinedStreamEvent

LOGGER = logging.getLogger(__name__)


def format_event(event: Any) -> str:
    """Render a decoded event as a single JSON line."""
    if isinstance(event, BaseModel):
        return event.model_dump_json()
    return json.dumps(event, separators=(",", ":"))


def make_printer(
    running: asyncio.Event,
    limit: Optional[int] = None,
    out: Optional[TextIO] = None,
) -> Callable[[Any], None]:
    """Handler printing events (stdout by default), clearing running at limit."""
    seen = 0

    def handler(event: Any) -> None:
        nonlocal seen
        (out or sys.stdout).write(format_event(event) + "\n")
        seen += 1
        if limit is not None and seen >= limit:
            running.clear()

    return handler


def build_config(args: argparse.Namespace) -> StreamConfig:
    """Environment config with CLI overrides applied."""
    config = StreamConfig.from_env()
    if args.ws_endpoint:
        config.ws_endpoint = args.ws_endpoint
    if args.proxy:
        config.proxy_url = args.proxy
    return config


async def run(
    config: StreamConfig,
    streams: Optional[List[str]] = None,
    limit: Optional[int] = None,
    endpoint: Optional[str] = None,
) -> None:
    """
    Connect, stream until stopped, and always disconnect.

    endpoint (a raw "ws/<name>" target such as a listen key) takes
    precedence over streams; several streams share a combined connection.
    """
    running = asyncio.Event()
    running.set()
    streams = streams or []
    combined = endpoint is None and len(streams) > 1
    client = BinanceWebSocketClient(
        make_printer(running, limit),
        config=config,
        event_type=CombinedStreamEvent[Dict[str, Any]] if combined else Any,
    )
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, running.clear)
    try:
        if endpoint is not None:
            await client.connect(endpoint)
        elif combined:
            await client.connect_multiple(streams)
        else:
            await client.connect(streams[0])
        await client.event_loop(running)
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
        if client.socket is not None:
            await client.disconnect()


def build_parser() -> argparse.ArgumentParser:
    """CLI arguments for the stream demo."""
    p = argparse.ArgumentParser(
        description="Print Binance WebSocket stream events."
    )
    target = p.add_mutually_exclusive_group(required=True)
    target.add_argument(
        "--stream", action="append", dest="streams",
        help="Topic name, e.g. btcusdt@trade (repeat for combined streams).",
    )
    target.add_argument(
        "--endpoint",
        help="Raw endpoint connected as ws/<name>, e.g. a user data listen key.",
    )
    p.add_argument(
        "--ws-endpoint",
        help="Override base stream URL (default BINANCE_WS_ENDPOINT).",
    )
    p.add_argument(
        "--proxy",
        help="SOCKS5 proxy address (default WSS_PROXY).",
    )
    p.add_argument(
        "--limit", type=int,
        help="Stop after this many events.",
    )
    p.add_argument("--log-level", default="INFO")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    """Parse CLI args and stream events to stdout."""
    ensure_env_loaded()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(
            run(build_config(args), args.streams, args.limit, args.endpoint)
        )
    except BinanceStreamError as exc:
        LOGGER.error("Stream stopped: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
