"""Async client for the 1inch swap API (v6)."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from ..core.errors import ConfigurationError, ProviderError


DEFAULT_ONEINCH_BASE_URL = "https://api.1inch.dev"


class OneInchProvider:
    """Wrapper around ``GET /swap/v6.0/{chainId}/swap``."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: Optional[str] = None,
        timeout_s: float = 20,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("1inch API key is not configured")
        self.api_key = api_key
        self.base_url = (base_url or DEFAULT_ONEINCH_BASE_URL).rstrip("/")
        self.timeout_s = timeout_s
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "accept": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    async def swap(self, chain_id: int, params: Dict[str, Any]) -> Dict[str, Any]:
        """Fetch an executable swap for ``params`` (src, dst, amount, from, receiver, slippage, ...)."""
        path = f"/swap/v6.0/{chain_id}/swap"
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_s,
                transport=self._transport,
            ) as client:
                response = await client.get(path, params=params, headers=self._headers())
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                f"1inch swap returned {exc.response.status_code}",
                provider="1inch",
                status_code=exc.response.status_code,
                body=exc.response.text,
            ) from exc
        except httpx.RequestError as exc:
            raise ProviderError(f"1inch swap request failed: {exc}", provider="1inch") from exc
