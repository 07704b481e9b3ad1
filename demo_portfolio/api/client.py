"""Demo backend REST client with envelope unwrapping."""
from __future__ import annotations

import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ..config import ApiConfig

logger = logging.getLogger(__name__)


class BackendError(RuntimeError):
    """A backend request failed or returned a non-success envelope."""

    def __init__(self, endpoint: str, message: str) -> None:
        super().__init__(f"{endpoint}: {message}")
        self.endpoint = endpoint
        self.message = message


class DemoApiClient:
    """Fetch ``{success, data, error}`` envelopes from the demo REST API."""

    def __init__(self, config: ApiConfig) -> None:
        self.base_url = config.base_url.rstrip("/")
        self.token = config.token
        self.timeout = config.request_timeout
        self.endpoints = config.endpoints

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _client_timeout(self) -> aiohttp.ClientTimeout:
        # 0 disables the total timeout entirely
        return aiohttp.ClientTimeout(total=self.timeout or None)

    async def _get(self, name: str, path: str) -> Any:
        """GET ``path`` and return the envelope's ``data`` member."""
        url = f"{self.base_url}{path}"
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        logger.debug("GET %s", url)
        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.get(
                url, headers=self._headers(), timeout=self._client_timeout()
            ) as response:
                try:
                    envelope = await response.json(content_type=None)
                except ValueError as e:
                    raise BackendError(
                        name, f"HTTP {response.status}: invalid JSON response"
                    ) from e

                if not isinstance(envelope, dict):
                    raise BackendError(name, f"HTTP {response.status}: malformed envelope")

                if response.status != 200 or not envelope.get("success"):
                    message = envelope.get("error") or f"HTTP {response.status}"
                    raise BackendError(name, str(message))

                return envelope.get("data")

    async def fetch_portfolio(self) -> dict[str, Any]:
        """Holdings, wallet balances, recent activity and rent summary."""
        return await self._get("portfolio", self.endpoints.portfolio) or {}

    async def fetch_lending_pools(self) -> Any:
        return await self._get("lending_pools", self.endpoints.lending_pools)

    async def fetch_borrowable_holdings(self) -> Any:
        return await self._get(
            "borrowable_holdings", self.endpoints.borrowable_holdings
        )

    async def fetch_portfolio_history(self) -> Any:
        return await self._get("history", self.endpoints.history)

    async def fetch_wallet_balances(self) -> dict[str, Any]:
        return await self._get("wallet_balances", self.endpoints.wallet_balances) or {}

    async def fetch_system_config(self) -> dict[str, Any]:
        """System flags; ``demoMode`` governs which data source is live."""
        return await self._get("system_config", self.endpoints.system_config) or {}
