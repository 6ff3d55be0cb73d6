"""
Unit Tests for the BTC Price Fetcher

These tests verify that PriceFetcher:
- Maps the primary payload (shape A) onto a PricePoint
- Falls back to the secondary source (shape B) on 502, network and parse failures
- Raises PriceUnavailableError when both sources fail

Run with:
    pytest tests/unit/test_price_fetcher.py -v
"""

import pytest

from core.schemas import PricePoint
from fetchers.http_client import JSONHTTPClient, UpstreamError, UpstreamStatusError
from fetchers.price import PriceFetcher, PriceSource, PriceUnavailableError


PRIMARY_URL = "https://luky3.jinr.ru/bitcoin.json"
FALLBACK_URL = "https://api.blockchain.info/stats"

PRIMARY = PriceSource(name="primary_price", url=PRIMARY_URL, price_field="last", volume_field="total_fees")
FALLBACK = PriceSource(
    name="fallback_price", url=FALLBACK_URL, price_field="market_price_usd", volume_field="trade_volume_btc"
)


# ============================================
# Helpers
# ============================================

def make_fetcher(monkeypatch, responses):
    """
    Build a fetcher whose client answers each URL from ``responses``.

    A response that is an Exception instance is raised instead of returned.
    Returns the fetcher and the list of requested URLs in order.
    """
    client = JSONHTTPClient()
    calls = []

    async def mock_get_json(url, source="http"):
        calls.append(url)
        response = responses[url]
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(client, "get_json", mock_get_json)
    return PriceFetcher(client, [PRIMARY, FALLBACK]), calls


# ============================================
# Primary Source
# ============================================

class TestPrimarySource:
    """Tests for the primary endpoint"""

    @pytest.mark.asyncio
    async def test_primary_payload_is_mapped(self, monkeypatch):
        """last/total_fees become price_usd/volume_units"""
        fetcher, calls = make_fetcher(monkeypatch, {
            PRIMARY_URL: {"last": 43000.5, "total_fees": 1.25, "other": "ignored"},
        })

        point = await fetcher.get_price()

        assert point == PricePoint(price_usd=43000.5, volume_units=1.25)
        assert calls == [PRIMARY_URL]

    @pytest.mark.asyncio
    async def test_numeric_strings_are_accepted(self, monkeypatch):
        """Numbers delivered as strings are converted"""
        fetcher, _ = make_fetcher(monkeypatch, {
            PRIMARY_URL: {"last": "43000.5", "total_fees": "1.25"},
        })

        point = await fetcher.get_price()

        assert point.price_usd == 43000.5
        assert point.volume_units == 1.25


# ============================================
# Fallback Source
# ============================================

class TestFallbackSource:
    """Tests for falling back to the secondary endpoint"""

    @pytest.mark.asyncio
    async def test_bad_gateway_uses_fallback(self, monkeypatch):
        """HTTP 502 on the primary source triggers the fallback"""
        fetcher, calls = make_fetcher(monkeypatch, {
            PRIMARY_URL: UpstreamStatusError(PRIMARY_URL, 502, "Bad Gateway"),
            FALLBACK_URL: {"market_price_usd": 50000, "trade_volume_btc": 2},
        })

        point = await fetcher.get_price()

        assert point == PricePoint(price_usd=50000, volume_units=2)
        assert calls == [PRIMARY_URL, FALLBACK_URL]

    @pytest.mark.asyncio
    async def test_network_error_uses_fallback(self, monkeypatch):
        """A transport failure on the primary source triggers the fallback"""
        fetcher, calls = make_fetcher(monkeypatch, {
            PRIMARY_URL: UpstreamError("Timeout after 10s"),
            FALLBACK_URL: {"market_price_usd": 51000.0, "trade_volume_btc": 3.5},
        })

        point = await fetcher.get_price()

        assert point.price_usd == 51000.0
        assert point.volume_units == 3.5
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_unexpected_primary_shape_uses_fallback(self, monkeypatch):
        """A primary payload without the mapped fields triggers the fallback"""
        fetcher, _ = make_fetcher(monkeypatch, {
            PRIMARY_URL: {"price": 43000.0},
            FALLBACK_URL: {"market_price_usd": 50000, "trade_volume_btc": 2},
        })

        assert (await fetcher.get_price()).price_usd == 50000

    @pytest.mark.asyncio
    async def test_non_numeric_primary_value_uses_fallback(self, monkeypatch):
        """A primary field that is not a number triggers the fallback"""
        fetcher, _ = make_fetcher(monkeypatch, {
            PRIMARY_URL: {"last": None, "total_fees": 1.0},
            FALLBACK_URL: {"market_price_usd": 50000, "trade_volume_btc": 2},
        })

        assert (await fetcher.get_price()).volume_units == 2

    @pytest.mark.asyncio
    async def test_primary_list_payload_uses_fallback(self, monkeypatch):
        """A non-object primary payload triggers the fallback"""
        fetcher, _ = make_fetcher(monkeypatch, {
            PRIMARY_URL: [1, 2, 3],
            FALLBACK_URL: {"market_price_usd": 50000, "trade_volume_btc": 2},
        })

        assert (await fetcher.get_price()).price_usd == 50000


# ============================================
# Total Failure
# ============================================

class TestTotalFailure:
    """Tests for both sources failing"""

    @pytest.mark.asyncio
    async def test_both_sources_failing_raises(self, monkeypatch):
        """PriceUnavailableError carries the terminal message"""
        fetcher, calls = make_fetcher(monkeypatch, {
            PRIMARY_URL: UpstreamStatusError(PRIMARY_URL, 502, "Bad Gateway"),
            FALLBACK_URL: UpstreamError("connection reset"),
        })

        with pytest.raises(PriceUnavailableError, match="could not retrieve price data"):
            await fetcher.get_price()
        assert calls == [PRIMARY_URL, FALLBACK_URL]

    @pytest.mark.asyncio
    async def test_fallback_parse_error_raises(self, monkeypatch):
        """A malformed fallback payload is also terminal"""
        fetcher, _ = make_fetcher(monkeypatch, {
            PRIMARY_URL: UpstreamError("down"),
            FALLBACK_URL: {"market_price_usd": 50000},
        })

        with pytest.raises(PriceUnavailableError) as exc_info:
            await fetcher.get_price()
        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_fetcher_requires_a_source(self):
        """An empty source list is rejected"""
        with pytest.raises(ValueError):
            PriceFetcher(JSONHTTPClient(), [])
