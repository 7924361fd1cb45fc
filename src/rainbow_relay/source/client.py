"""
JSON-RPC client for the source chain.

The source node speaks JSON-RPC 2.0 over HTTP POST. Each call sends one
request object and expects either a `result` or an `error` member back.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any

import httpx

from rainbow_relay.errors import ConfigurationError, SourceRpcError, TransportError
from rainbow_relay.lightclient import LightClientBlock, parse_light_client_block
from rainbow_relay.types import CryptoHash

from .interface import BlockView, NodeStatus

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
"""HTTP request timeout in seconds."""

JSONRPC_VERSION = "2.0"
"""Protocol version sent with every request."""


class NearRpcClient:
    """
    Source chain reader backed by a node's JSON-RPC endpoint.

    Use as an async context manager, or call `aclose()` when done:

        async with NearRpcClient("https://rpc.testnet.near.org") as source:
            status = await source.status()
    """

    def __init__(
        self,
        node_url: str,
        *,
        network_id: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            node_url: JSON-RPC endpoint of the source chain node.
            network_id: Expected chain id; checked against `status()` when set.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport, for tests.
        """
        self.node_url = node_url
        self.network_id = network_id
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._ids = itertools.count(1)

    async def __aenter__(self) -> NearRpcClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def call(self, method: str, params: Any) -> Any:
        """
        Perform one JSON-RPC call and return its `result` member.

        Raises:
            TransportError: The request failed or the server answered non-2xx
                or with a body that is not a JSON-RPC response.
            SourceRpcError: The server answered with a JSON-RPC error object.
        """
        request = {
            "jsonrpc": JSONRPC_VERSION,
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        logger.debug("RPC -> %s %s", method, params)

        try:
            response = await self._client.post(self.node_url, json=request)
            response.raise_for_status()
            body = response.json()
        except httpx.RequestError as exc:
            raise TransportError(
                f"Network error calling {method} on {self.node_url}: {exc}"
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"HTTP error {exc.response.status_code} calling {method}: "
                f"{exc.response.text[:200]}"
            ) from exc
        except ValueError as exc:
            raise TransportError(f"Invalid JSON in response to {method}: {exc}") from exc

        if not isinstance(body, dict):
            raise TransportError(f"Unexpected response to {method}: {body!r}")

        error = body.get("error")
        if error is not None:
            code = error.get("code") if isinstance(error, dict) else None
            raise SourceRpcError(f"{method} failed: {error}", code=code)

        if "result" not in body:
            raise TransportError(f"Response to {method} has neither result nor error")
        return body["result"]

    async def status(self) -> NodeStatus:
        """
        Return the node's current status.

        Raises:
            ConfigurationError: `network_id` is set and the node serves another chain.
        """
        status = NodeStatus.model_validate(await self.call("status", []))
        if self.network_id is not None and status.chain_id and status.chain_id != self.network_id:
            raise ConfigurationError(
                f"Connected to network {status.chain_id!r}, expected {self.network_id!r}"
            )
        return status

    async def block(self, height: int) -> BlockView:
        """Return the block at `height`."""
        return BlockView.model_validate(await self.call("block", {"block_id": int(height)}))

    async def next_light_client_block(self, after_hash: CryptoHash) -> LightClientBlock | None:
        """
        Return the light-client block proof that follows `after_hash`.

        The node answers with an empty result until the proof exists, which
        happens shortly after the block becomes final.
        """
        result = await self.call("next_light_client_block", [after_hash.to_base58()])
        if not result:
            return None
        logger.debug("Received light client block: %s", result)
        return parse_light_client_block(result)
