"""Async JSON-RPC client for chain signature and transaction lookups."""

from __future__ import annotations

import itertools
import logging
from typing import Any

import httpx

from .models import SignatureInfo

logger = logging.getLogger(__name__)


class ChainRPCError(RuntimeError):
    """Raised when the RPC node returns an HTTP or JSON-RPC error."""


class SolanaRPCClient:
    """Minimal async client for the Solana JSON-RPC API."""

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        commitment: str = "confirmed",
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self.timeout = timeout
        self.commitment = commitment
        self.client = client
        self._owns_client = client is None
        self._ids = itertools.count(1)

    async def __aenter__(self):
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client and self._owns_client:
            await self.client.aclose()
            self.client = None

    async def call(self, method: str, params: list[Any]) -> Any:
        """Issue one JSON-RPC request and return its ``result``."""
        if not self.client:
            raise RuntimeError("Client not initialized. Use async context manager.")

        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        logger.debug("RPC %s -> %s", method, self.url)
        try:
            response = await self.client.post(self.url, json=payload)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ChainRPCError(f"{method} failed: {exc}") from exc

        if body.get("error"):
            error = body["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise ChainRPCError(f"{method} failed: {message}")
        return body.get("result")

    async def get_signatures_for_address(
        self,
        address: str,
        before: str | None = None,
        limit: int = 1000,
    ) -> list[SignatureInfo]:
        """Return signatures for ``address``, newest first."""
        options: dict[str, Any] = {"limit": limit, "commitment": self.commitment}
        if before:
            options["before"] = before
        result = await self.call("getSignaturesForAddress", [address, options]) or []
        return [
            SignatureInfo(
                signature=item["signature"],
                block_time=item.get("blockTime"),
                err=item.get("err"),
            )
            for item in result
        ]

    async def get_transaction(self, signature: str) -> dict[str, Any] | None:
        """Fetch a parsed transaction, or None when the node does not know it."""
        return await self.call(
            "getTransaction",
            [
                signature,
                {
                    "encoding": "jsonParsed",
                    "commitment": self.commitment,
                    "maxSupportedTransactionVersion": 0,
                },
            ],
        )
