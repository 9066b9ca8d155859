"""CoinMarketCap client tests"""

import httpx
import pytest

from app.core.config import settings
from app.core.errors import MarketDataError
from app.ingestion.cmc_client import CMCClient, LISTINGS_ENDPOINT
from app.schemas.cmc import CMCListing
from conftest import listing_payload


def _status(**overrides):
    status = {
        "timestamp": "2026-02-18T00:00:00Z",
        "error_code": 0,
        "error_message": None,
        "elapsed": 10,
        "credit_count": 1,
        "total_count": 2,
    }
    status.update(overrides)
    return status


def _client(handler) -> CMCClient:
    return CMCClient(api_key="k", base_url="https://cmc.test", timeout=1.0, transport=httpx.MockTransport(handler))


class TestCMCClient:
    """Listing fetch: one request, all-or-nothing envelope"""

    @pytest.mark.asyncio
    async def test_fetch_top_listing_parses_records(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "status": _status(),
                    "data": [
                        listing_payload(),
                        listing_payload(
                            id=1027,
                            name="Ethereum",
                            symbol="ETH",
                            slug="ethereum",
                            cmc_rank=2,
                            platform={"id": 1, "name": "Ethereum", "symbol": "ETH", "slug": "ethereum"},
                        ),
                    ],
                },
            )

        raw = await _client(handler).fetch_top_listing(250)
        records = [CMCListing.model_validate(entry) for entry in raw]

        assert len(seen) == 1
        request = seen[0]
        assert request.url.path == LISTINGS_ENDPOINT
        assert request.url.params["limit"] == "250"
        assert request.url.params["convert"] == "USD"
        assert request.headers["X-CMC_PRO_API_KEY"] == "k"

        assert [r.id for r in records] == [1, 1027]
        assert records[0].usd.price == 50000.0
        assert records[0].platform is None
        assert records[1].platform.name == "Ethereum"
        assert records[0].date_added.year == 2013

    @pytest.mark.asyncio
    async def test_null_and_duplicate_tags_are_normalized(self):
        def handler(request):
            return httpx.Response(
                200,
                json={"status": _status(), "data": [listing_payload(tags=None), listing_payload(id=2, tags=["DeFi", "DeFi", "Layer 1"])]},
            )

        records = [CMCListing.model_validate(entry) for entry in await _client(handler).fetch_top_listing(2)]

        assert records[0].tags == []
        assert records[1].tags == ["DeFi", "Layer 1"]

    @pytest.mark.asyncio
    async def test_http_error_raises_market_data_error(self):
        def handler(request):
            return httpx.Response(401, json={"status": _status(error_code=1002, error_message="API key missing.")})

        with pytest.raises(MarketDataError) as exc_info:
            await _client(handler).fetch_top_listing(10)

        assert "API key missing." in str(exc_info.value)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_error_code_in_ok_response_raises(self):
        def handler(request):
            return httpx.Response(200, json={"status": _status(error_code=1008, error_message="Rate limit"), "data": []})

        with pytest.raises(MarketDataError):
            await _client(handler).fetch_top_listing(10)

    @pytest.mark.asyncio
    async def test_timeout_raises_market_data_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(MarketDataError, match="timed out"):
            await _client(handler).fetch_top_listing(10)

    @pytest.mark.asyncio
    async def test_transport_error_raises_market_data_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(MarketDataError):
            await _client(handler).fetch_top_listing(10)

    @pytest.mark.asyncio
    async def test_non_json_body_raises(self):
        def handler(request):
            return httpx.Response(502, text="<html>Bad gateway</html>")

        with pytest.raises(MarketDataError):
            await _client(handler).fetch_top_listing(10)

    @pytest.mark.asyncio
    async def test_malformed_record_is_returned_raw(self):
        broken = listing_payload(id=2, cmc_rank=None)
        del broken["slug"]

        def handler(request):
            return httpx.Response(200, json={"status": _status(), "data": [listing_payload(), broken, listing_payload(id=3)]})

        records = await _client(handler).fetch_top_listing(10)

        assert [r["id"] for r in records] == [1, 2, 3]
        assert records[1]["cmc_rank"] is None

    @pytest.mark.asyncio
    async def test_malformed_envelope_raises(self):
        def handler(request):
            return httpx.Response(200, json={"status": _status(), "data": {"1": listing_payload()}})

        with pytest.raises(MarketDataError, match="Malformed"):
            await _client(handler).fetch_top_listing(10)

    @pytest.mark.asyncio
    async def test_missing_data_raises(self):
        def handler(request):
            return httpx.Response(200, json={"status": _status()})

        with pytest.raises(MarketDataError, match="Malformed"):
            await _client(handler).fetch_top_listing(10)

    def test_missing_api_key_is_rejected(self, monkeypatch):
        monkeypatch.setattr(settings, "CMC_API_KEY", None)

        with pytest.raises(MarketDataError, match="CMC_API_KEY"):
            CMCClient()
