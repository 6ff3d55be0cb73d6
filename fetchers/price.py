"""
BTC Price Fetcher

Fetches the BTC price (USD) and traded volume (BTC) from a primary endpoint and
falls back to a secondary endpoint with a different payload shape.

Sources:
    primary   https://luky3.jinr.ru/bitcoin.json
              {"last": ..., "total_fees": ...}  (mapping unconfirmed)
    fallback  https://api.blockchain.info/stats
              {"market_price_usd": 50000.0, "trade_volume_btc": 2.0, ...}

Field names come from settings, one pair per source.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from core.logging import get_logger
from core.schemas import PricePoint
from fetchers.http_client import JSONHTTPClient, UpstreamError


class PriceUnavailableError(RuntimeError):
    """Neither price source produced a usable PricePoint."""


class PriceSource(BaseModel):
    """
    One price endpoint and the names of its price and volume fields.

    Attributes:
        name: Label used in logs ("primary_price", "fallback_price")
        url: Endpoint URL
        price_field: Top-level field holding the USD price
        volume_field: Top-level field holding the BTC volume
    """

    name: str
    url: str
    price_field: str
    volume_field: str

    model_config = ConfigDict(frozen=True)

    def parse(self, data: Any) -> PricePoint:
        """
        Map a payload of this source onto a PricePoint.

        Raises:
            KeyError: Payload is not an object or lacks one of the fields
            ValidationError: A field is not a finite number
        """
        if not isinstance(data, dict):
            raise KeyError(f"{self.name}: expected a JSON object, got {type(data).__name__}")
        missing = [f for f in (self.price_field, self.volume_field) if f not in data]
        if missing:
            raise KeyError(f"{self.name}: missing field(s) {', '.join(missing)}")
        return PricePoint(
            price_usd=data[self.price_field],
            volume_units=data[self.volume_field],
        )


class PriceFetcher:
    """
    Primary-then-fallback BTC price fetcher.

    Sources are tried in order; the first one that answers with a parsable
    payload wins. Failures before the last source are logged as warnings.

    Example:
        >>> fetcher = PriceFetcher(client, [primary, fallback])
        >>> point = await fetcher.get_price()
        >>> print(point.price_usd, point.volume_units)
    """

    def __init__(self, client: JSONHTTPClient, sources: List[PriceSource]) -> None:
        if not sources:
            raise ValueError("PriceFetcher needs at least one source")
        self.client = client
        self.sources = sources
        self.logger = get_logger(__name__)

    async def get_price(self) -> PricePoint:
        """
        Fetch a PricePoint from the first source that works.

        Raises:
            PriceUnavailableError: Every source failed
        """
        last_error: Optional[Exception] = None

        for index, source in enumerate(self.sources):
            try:
                data = await self.client.get_json(source.url, source=source.name)
                point = source.parse(data)
            except (UpstreamError, KeyError, ValidationError) as e:
                last_error = e
                if index + 1 < len(self.sources):
                    self.logger.warning(f"Price source '{source.name}' failed: {e}. Trying '{self.sources[index + 1].name}'")
                else:
                    self.logger.error(f"Price source '{source.name}' failed: {e}")
                continue

            self.logger.info(f"BTC data received from '{source.name}': price={point.price_usd} volume={point.volume_units}")
            return point

        raise PriceUnavailableError("could not retrieve price data") from last_error
