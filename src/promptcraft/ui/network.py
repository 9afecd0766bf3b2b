"""Connectivity check performed before any generation request."""

import asyncio
import logging
import socket
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)


def _can_connect(host: str, port: int, timeout: float) -> bool:
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError as e:
        logger.warning(f"Connectivity check to {host}:{port} failed: {e}")
        return False


async def is_online(url: str, timeout: float = 2.0) -> bool:
    """Return True if a TCP connection to ``url``'s host can be opened.

    Only a socket is opened; no HTTP request is sent.
    """
    parts = urlsplit(url)
    if not parts.hostname:
        logger.warning(f"Cannot check connectivity for malformed URL: {url}")
        return False
    port = parts.port or (443 if parts.scheme == "https" else 80)
    return await asyncio.to_thread(_can_connect, parts.hostname, port, timeout)
