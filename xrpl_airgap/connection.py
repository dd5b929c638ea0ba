"""
Scoped JSON-RPC connections.

Each ``connect()`` block owns a fresh transport and closes it on every
exit path. Connections never share state, so the offline demo can
gather on one and relay on another.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from xrpl_airgap.jsonrpc_client import JsonRpcClient
from xrpl_airgap.transport import HttpxTransport, JsonRpcTransport

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def connect(
    url: str,
    *,
    name: str = "default",
    timeout: float = 30.0,
    transport: JsonRpcTransport | None = None,
) -> AsyncIterator[JsonRpcClient]:
    """Open a connection to ``url`` for the duration of the block."""
    client = JsonRpcClient(url, transport or HttpxTransport(timeout=timeout), name=name)
    LOGGER.info("connection %s opened: %s", name, url)
    try:
        yield client
    finally:
        await client.aclose()
        LOGGER.info("connection %s closed", name)


def warn_if_shared_endpoint(gather_url: str, relay_url: str) -> bool:
    """Log a warning when both offline connections target one endpoint.

    Allowed: the connections are still separate clients. Returns True
    when the endpoints match.
    """
    shared = gather_url.rstrip("/") == relay_url.rstrip("/")
    if shared:
        LOGGER.warning(
            "gathering and relay connections use the same endpoint %s", gather_url
        )
    return shared
