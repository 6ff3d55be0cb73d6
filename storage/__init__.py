"""
Storage Package

Handles the only state that outlives a refresh cycle: the cached USD/RUB rate.

- kv_store: String key-value stores (JSON file on disk, in-memory for tests)
- rate_cache: Time-boxed cache of the exchange rate on top of a key-value store
"""

from storage.kv_store import JsonFileStore, KeyValueStore, MemoryStore
from storage.rate_cache import RateCache

__all__ = ["JsonFileStore", "KeyValueStore", "MemoryStore", "RateCache"]
