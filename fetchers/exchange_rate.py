"""
USD/RUB Exchange Rate Fetcher

Resolves the current rate in this order:

    1. Fresh cache hit (younger than the TTL)       -> cached rate, no request
    2. Successful request to the rate endpoint      -> new rate, cache overwritten
    3. Request failed, some record cached (stale)   -> stale cached rate
    4. Request failed, nothing cached               -> default rate (90)

get_rate() never raises; the exchange rate is never the reason a cycle fails.

Rate endpoint response (abridged):
    {
      "Date": "2024-01-01T11:30:00+03:00",
      "Valute": {
        "USD": {"CharCode": "USD", "Nominal": 1, "Value": 89.6883, ...},
        ...
      }
    }
"""

from typing import Any, Callable, List, Optional

from pydantic import ValidationError

from core.logging import get_logger
from core.schemas import CachedRate
from core.utils.time import current_utc_timestamp, to_utc_datetime
from fetchers.http_client import JSONHTTPClient, UpstreamError
from storage.rate_cache import RateCache


DEFAULT_RATE = 90.0


def _now_ms() -> int:
    return current_utc_timestamp(milliseconds=True)


def extract_path(data: Any, path: List[str]) -> Any:
    """
    Walk nested dictionaries along ``path``.

    Raises:
        KeyError: If a key is missing or an intermediate value is not a dict
    """
    node = data
    for key in path:
        if not isinstance(node, dict) or key not in node:
            raise KeyError(f"Missing '{key}' in response (path: {'.'.join(path)})")
        node = node[key]
    return node


class ExchangeRateFetcher:
    """
    Cache-first USD/RUB rate fetcher with stale-on-error fallback.

    Attributes:
        client: HTTP client used for the rate endpoint
        cache: RateCache holding the last fetched rate
        url: Rate endpoint URL
        rate_path: Keys leading to the numeric rate in the response
        default_rate: Returned when both network and cache are unavailable
        clock: Returns the current time in epoch milliseconds

    Example:
        >>> fetcher = ExchangeRateFetcher(client, cache, settings.rate_url, settings.rate_path_list)
        >>> rate = await fetcher.get_rate()
    """

    def __init__(
        self,
        client: JSONHTTPClient,
        cache: RateCache,
        url: str,
        rate_path: List[str],
        default_rate: float = DEFAULT_RATE,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.client = client
        self.cache = cache
        self.url = url
        self.rate_path = rate_path
        self.default_rate = default_rate
        self.clock = clock or _now_ms
        self.logger = get_logger(__name__)

    async def get_rate(self) -> float:
        """Return a usable USD/RUB rate; never raises."""
        now = self.clock()

        fresh = self.cache.read_fresh(now)
        if fresh is not None:
            self.logger.info(
                f"Using cached USD/RUB rate {fresh.rate} "
                f"(cached at {to_utc_datetime(fresh.timestamp).isoformat()})"
            )
            return fresh.rate

        try:
            data = await self.client.get_json(self.url, source="rate")
            record = CachedRate(rate=extract_path(data, self.rate_path), timestamp=now)
        except (UpstreamError, KeyError, ValidationError) as e:
            self.logger.error(f"Failed to fetch USD/RUB rate: {e}")
            return self._fallback_rate()

        try:
            self.cache.write(record)
        except OSError as e:
            self.logger.error(f"Fetched USD/RUB rate {record.rate} but could not cache it: {e}")
            return record.rate

        self.logger.info(f"USD/RUB rate refreshed and cached: {record.rate}")
        return record.rate

    def _fallback_rate(self) -> float:
        stale = self.cache.read()
        if stale is not None:
            self.logger.warning(f"Using stale cached USD/RUB rate {stale.rate}")
            return stale.rate

        self.logger.warning(f"No cached USD/RUB rate, using default {self.default_rate}")
        return self.default_rate
