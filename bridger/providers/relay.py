"""Async client for Relay's bridge API."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from ..core.errors import ProviderError


DEFAULT_RELAY_BASE_URL = "https://api.relay.link"


class RelayProvider:
    """Thin wrapper around https://api.relay.link endpoints."""

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout_s: float = 20,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or DEFAULT_RELAY_BASE_URL).rstrip("/")
        self.timeout_s = timeout_s
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "accept": "application/json, text/plain, */*",
            "content-type": "application/json",
            "user-agent": "bridger/0.1",
        }

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_s,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, json=json, params=params, headers=self._headers())
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                f"Relay {method} {path} returned {exc.response.status_code}",
                provider="relay",
                status_code=exc.response.status_code,
                body=exc.response.text,
            ) from exc
        except httpx.RequestError as exc:
            raise ProviderError(f"Relay {method} {path} failed: {exc}", provider="relay") from exc

    async def quote(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Request a bridge quote from Relay.

        `payload` follows the schema documented at https://docs.relay.link/
        (user, originChainId, destinationChainId, amount, ...).
        """

        resp = await self._request("POST", "/quote", json=payload)
        return resp.json()

    async def get_status(self, request_id: str) -> Dict[str, Any]:
        """Fetch the execution status of a bridge request."""

        resp = await self._request("GET", "/intents/status", params={"requestId": request_id})
        return resp.json()
