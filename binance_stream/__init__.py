"""
Binance market data streaming client.

Builds stream topic names, opens direct or SOCKS5-tunneled WebSocket
connections, and drives a read-decode-dispatch loop over them.
"""
__all__ = ["__version__"]
__version__ = "0.1.0"
