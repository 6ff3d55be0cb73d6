"""
USD/RUB Rate Cache

A time-boxed cache of a single exchange rate stored JSON-encoded under one
key of a KeyValueStore:

    usdRubRateCache -> '{"rate": 92.5, "timestamp": 1704110400000}'

The cache itself never expires records; it only reports freshness. Expired
records stay readable so that the rate fetcher can fall back to them when a
refresh fails.
"""

from typing import Optional

from pydantic import ValidationError

from core.logging import get_logger
from core.schemas import CachedRate
from storage.kv_store import KeyValueStore


class RateCache:
    """
    Cached exchange rate with a TTL.

    Attributes:
        store: Backing key-value store
        key: Storage key of the record
        ttl_ms: Time-to-live in milliseconds
    """

    def __init__(self, store: KeyValueStore, key: str, ttl_ms: int) -> None:
        self.store = store
        self.key = key
        self.ttl_ms = ttl_ms
        self.logger = get_logger(__name__)

    def read(self) -> Optional[CachedRate]:
        """
        Load the cached record regardless of its age.

        Returns:
            CachedRate, or None if the key is absent or the stored value is
            not a valid record (a broken record is treated as a miss).
        """
        raw = self.store.get_item(self.key)
        if raw is None:
            return None

        try:
            return CachedRate.model_validate_json(raw)
        except ValidationError as e:
            self.logger.warning(f"Discarding invalid cached rate under '{self.key}': {e.error_count()} error(s)")
            return None

    def read_fresh(self, now_ms: int) -> Optional[CachedRate]:
        """Return the cached record only if it is younger than the TTL."""
        cached = self.read()
        if cached is not None and cached.is_fresh(now_ms, self.ttl_ms):
            return cached
        return None

    def write(self, record: CachedRate) -> None:
        """Store ``record``, replacing any previous one."""
        self.store.set_item(self.key, record.model_dump_json())
