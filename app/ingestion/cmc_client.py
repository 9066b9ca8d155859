"""CoinMarketCap listings client."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.core.errors import MarketDataError
from app.core.logging import get_logger
from app.schemas.cmc import CMCListingsResponse
from .base import BaseListingSource

log = get_logger("ingestion.cmc")

LISTINGS_ENDPOINT = "/v1/cryptocurrency/listings/latest"


class CMCClient(BaseListingSource):
    """Fetches the ranked listing from CoinMarketCap in a single request.

    Every failure of the request itself (transport, timeout, auth, non-2xx,
    malformed envelope) is raised as ``MarketDataError``. Individual entries
    are returned unparsed so one bad record cannot sink the listing. There
    is no retry here; callers decide.
    """

    name = "coinmarketcap"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or settings.CMC_API_KEY
        if not self.api_key:
            raise MarketDataError("CMC_API_KEY is required")
        self.base_url = (base_url or settings.CMC_API_BASE).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.CMC_TIMEOUT_SECONDS
        self._transport = transport

    async def fetch_top_listing(self, limit: int) -> List[Dict[str, Any]]:
        """Return the top ``limit`` tokens by rank, in provider order."""
        payload = await self._get(LISTINGS_ENDPOINT, {"start": 1, "limit": limit, "convert": "USD"})
        try:
            response = CMCListingsResponse.model_validate(payload)
        except ValidationError as exc:
            log.error(f"cmc.response.malformed endpoint={LISTINGS_ENDPOINT} errors={exc.error_count()}")
            raise MarketDataError(f"Malformed CMC listings response: {exc}") from exc

        log.info(
            f"cmc.listings.parsed count={len(response.data)} "
            f"credit_count={response.status.credit_count} total_count={response.status.total_count}"
        )
        return response.data

    async def _get(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        headers = {"X-CMC_PRO_API_KEY": self.api_key, "Accept": "application/json"}
        start = time.perf_counter()
        log.debug(f"cmc.request.start endpoint={endpoint} params={params}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(url, params=params, headers=headers)
        except httpx.TimeoutException as exc:
            log.error(f"cmc.request.timeout endpoint={endpoint} timeout={self.timeout}s")
            raise MarketDataError(f"CMC request timed out after {self.timeout}s") from exc
        except httpx.HTTPError as exc:
            log.error(f"cmc.request.error endpoint={endpoint}: {exc}")
            raise MarketDataError(f"CMC request failed: {exc}") from exc

        duration_ms = int((time.perf_counter() - start) * 1000)

        try:
            data = resp.json()
        except ValueError as exc:
            log.error(f"cmc.request.failed endpoint={endpoint} status={resp.status_code} body is not JSON")
            raise MarketDataError(f"CMC returned a non-JSON body (HTTP {resp.status_code})", resp.status_code) from exc

        if not isinstance(data, dict):
            raise MarketDataError("CMC returned an unexpected payload shape", resp.status_code)

        status = data.get("status") or {}
        if resp.is_error or status.get("error_code"):
            message = status.get("error_message") or f"CMC API error: {resp.status_code}"
            log.error(
                f"cmc.request.failed endpoint={endpoint} status={resp.status_code} "
                f"duration_ms={duration_ms} credit_count={status.get('credit_count')}: {message}"
            )
            raise MarketDataError(message, resp.status_code)

        log.info(
            f"cmc.request.success endpoint={endpoint} duration_ms={duration_ms} "
            f"credit_count={status.get('credit_count')} total_count={status.get('total_count')}"
        )
        return data
