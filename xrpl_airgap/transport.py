"""
Transport protocol for XRPL JSON-RPC calls.

Defines the seam where concrete HTTP implementations plug in. The
JSON-RPC client depends on this protocol, not on httpx directly, so the
transport can be swapped for a fake without editing client logic.

Concrete implementations:
    - HttpxTransport (default, owns one httpx.AsyncClient)
    - FakeTransport (tests, returns canned responses)

A transport is one "connection": it owns its HTTP client and must be
closed with ``aclose()``. Two transports never share state, which is
what lets the offline workflow gather on one connection and relay on
another.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import httpx


@runtime_checkable
class JsonRpcTransport(Protocol):
    """Async transport for JSON-RPC POST requests."""

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Send a JSON-RPC request and return the parsed response.

        Args:
            url: The JSON-RPC endpoint URL.
            payload: The JSON-RPC request body (method, params, id).

        Returns:
            Parsed JSON response as a dict.

        Raises:
            httpx.HTTPError: On transport-level failures (connection
                refused, timeout, TLS error, non-2xx status). The JSON-RPC
                client maps these to ConnectivityError.
        """
        ...

    async def aclose(self) -> None:
        """Release the underlying connection pool."""
        ...


class HttpxTransport:
    """Default transport backed by a single httpx.AsyncClient.

    The client is created lazily on first use so constructing a transport
    never touches the network.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def is_open(self) -> bool:
        return self._client is not None and not self._client.is_closed

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Send JSON-RPC request via httpx."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)

        response = await self._client.post(
            url,
            json=payload,
            headers={"Content-Type": "application/json"},
        )
        response.raise_for_status()
        result: dict[str, Any] = response.json()
        return result

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
