"""
Environment-driven configuration helpers.

Provides the dataclass holding Binance stream endpoints, the optional
SOCKS5 proxy address, and the WebSocket transport settings. The module
also exposes a lightweight .env loader for CLI entrypoints.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

DEFAULT_WS_ENDPOINT = "wss://stream.binance.com:9443"
TESTNET_WS_ENDPOINT = "wss://testnet.binance.vision"
PROXY_ENV_KEY = "WSS_PROXY"
DISABLED_VALUES = {"", "none", "off"}


def load_env_file(path: Path | str = Path(".env")) -> None:
    """
    Populate os.environ from a simple KEY=VALUE file if present.

    Lines beginning with # or blank lines are ignored. Existing environment
    variables are left unchanged to favor explicitly exported values.
    """
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip().strip("'\""))


def _env_optional(
    name: str, cast: Callable[[str], Any], default: Any
) -> Any:
    """Read a numeric setting; "none", "off" or an empty value gives None."""
    raw = os.getenv(name)
    if raw is None:
        return default
    if raw.strip().lower() in DISABLED_VALUES:
        return None
    try:
        return cast(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from exc


@dataclass
class StreamConfig:
    """
    Binance WebSocket stream connection parameters.

    Attributes:
        ws_endpoint: Base stream URL; "ws/<name>" or "stream?streams=" is
            appended per connection
        proxy_url: SOCKS5 proxy address (e.g. "socks5://127.0.0.1:1080");
            None connects directly
        open_timeout: Seconds allowed for the opening handshake
        ping_interval: Seconds between keepalive pings, None disables them
        ping_timeout: Seconds to wait for a pong before failing the
            connection, None waits indefinitely
        max_size: Largest accepted inbound message in bytes
    """

    ws_endpoint: str = DEFAULT_WS_ENDPOINT
    proxy_url: Optional[str] = None
    open_timeout: Optional[float] = 10.0
    ping_interval: Optional[float] = 20.0
    ping_timeout: Optional[float] = 20.0
    max_size: Optional[int] = 2 ** 20

    @classmethod
    def from_env(cls) -> StreamConfig:
        """Create config from environment variables."""
        return cls(
            ws_endpoint=os.getenv("BINANCE_WS_ENDPOINT", cls.ws_endpoint),
            proxy_url=os.getenv(PROXY_ENV_KEY) or None,
            open_timeout=_env_optional(
                "BINANCE_WS_OPEN_TIMEOUT", float, cls.open_timeout
            ),
            ping_interval=_env_optional(
                "BINANCE_WS_PING_INTERVAL", float, cls.ping_interval
            ),
            ping_timeout=_env_optional(
                "BINANCE_WS_PING_TIMEOUT", float, cls.ping_timeout
            ),
            max_size=_env_optional("BINANCE_WS_MAX_SIZE", int, cls.max_size),
        )

    @classmethod
    def testnet(cls) -> StreamConfig:
        """Config pointing at the spot testnet stream endpoint."""
        return cls(ws_endpoint=TESTNET_WS_ENDPOINT)

    def connect_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments forwarded to websockets' connect()."""
        return {
            "open_timeout": self.open_timeout,
            "ping_interval": self.ping_interval,
            "ping_timeout": self.ping_timeout,
            "max_size": self.max_size,
        }


def ensure_env_loaded(path: Path | str = Path(".env")) -> None:
    """
    Convenience wrapper around load_env_file for CLI entrypoints.

    Call this before StreamConfig.from_env() so values kept in a local
    .env file (such as WSS_PROXY) are visible.
    """
    load_env_file(path)
