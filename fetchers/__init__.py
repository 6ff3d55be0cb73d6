"""
Fetchers Package

Async clients for the external data the dashboard needs:
- http_client: Shared aiohttp JSON client and its exception types
- exchange_rate: USD/RUB rate with cache, stale-on-error and default fallback
- price: BTC price/volume with primary and fallback sources
"""
