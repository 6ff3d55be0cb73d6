"""
Refresh Scheduler

Drives the fetch -> compute -> render cycle: once immediately on start, then
every refresh_interval_seconds. Each tick launches its cycle as a separate
task so a slow cycle never delays the timer.

A cycle that is requested while another is still running is dropped (single
flight, no queue). The two fetches run concurrently and are joined fail-fast:
if either raises, the cycle renders an error and the previous total is left
untouched.

State owned by the scheduler instance:
    - is_refreshing: True while a cycle runs
    - previous_total: total_value_local of the last successful cycle
    - last_snapshot: last successful Snapshot, served by the API
"""

import asyncio
import contextlib
from typing import Optional, Set

from core.config import Settings, settings
from core.logging import get_logger
from core.schemas import Snapshot
from fetchers.exchange_rate import ExchangeRateFetcher
from fetchers.http_client import JSONHTTPClient
from fetchers.price import PriceFetcher, PriceSource
from services.event_bus import SNAPSHOT_TOPIC, EventBus, bus
from services.renderer import DisplaySurface, TableRenderer
from services.snapshot import compute_snapshot
from storage.kv_store import JsonFileStore
from storage.rate_cache import RateCache


class RefreshScheduler:
    """
    Background service running refresh cycles on a fixed interval.

    Example:
        >>> scheduler = get_refresh_scheduler()
        >>> await scheduler.start()
        >>> ...
        >>> await scheduler.stop()
    """

    def __init__(
        self,
        rate_fetcher: ExchangeRateFetcher,
        price_fetcher: PriceFetcher,
        renderer: TableRenderer,
        interval_seconds: float = 60,
        event_bus: Optional[EventBus] = None,
        http_client: Optional[JSONHTTPClient] = None,
    ) -> None:
        self.rate_fetcher = rate_fetcher
        self.price_fetcher = price_fetcher
        self.renderer = renderer
        self.interval_seconds = interval_seconds
        self.event_bus = event_bus or bus
        self.http_client = http_client

        self.is_refreshing = False
        self.previous_total: Optional[float] = None
        self.last_snapshot: Optional[Snapshot] = None

        self._logger = get_logger(__name__)
        self._running = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._cycles: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    # ============================================
    # Lifecycle
    # ============================================

    async def start(self) -> None:
        if self._running.is_set():
            return
        self._running.set()
        self._logger.info(f"Starting refresh scheduler (every {self.interval_seconds}s)...")
        self._task = asyncio.create_task(self._run(), name="refresh_scheduler")

    async def stop(self) -> None:
        """Stop the timer, wait for a running cycle, close the HTTP session."""
        if not self._running.is_set():
            return
        self._logger.info("Stopping refresh scheduler...")
        self._running.clear()
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        if self._cycles:
            await asyncio.gather(*self._cycles, return_exceptions=True)
        if self.http_client is not None:
            await self.http_client.close()

    async def _run(self) -> None:
        while self._running.is_set():
            cycle = asyncio.create_task(self.refresh(), name="refresh_cycle")
            self._cycles.add(cycle)
            cycle.add_done_callback(self._cycles.discard)
            await asyncio.sleep(self.interval_seconds)

    # ============================================
    # Cycle
    # ============================================

    async def refresh(self) -> Optional[Snapshot]:
        """
        Run one fetch -> compute -> render cycle.

        Returns:
            The new Snapshot, or None if the cycle was skipped or failed.
            Failures are rendered and logged, never raised.
        """
        if self.is_refreshing:
            self._logger.info("Previous refresh still running, skipping this one")
            return None

        self.is_refreshing = True
        try:
            self.renderer.show_loading()

            rate, price_point = await asyncio.gather(
                self.rate_fetcher.get_rate(),
                self.price_fetcher.get_price(),
            )

            snapshot = compute_snapshot(price_point, rate, self.previous_total)
            self.previous_total = snapshot.total_value_local
            self.last_snapshot = snapshot

            self.renderer.render(snapshot)
            await self.event_bus.publish(SNAPSHOT_TOPIC, snapshot.model_dump(mode="json"))

            self._logger.info(
                f"Refresh complete: total={snapshot.total_value_local:.2f} RUB "
                f"change={snapshot.change_local:+.2f} RUB"
            )
            return snapshot

        except Exception as e:
            self._logger.error(f"Refresh cycle failed: {e}")
            self.renderer.render_error(str(e))
            return None

        finally:
            self.is_refreshing = False


# ============================================
# Factory / Singleton
# ============================================

def build_refresh_scheduler(cfg: Settings = settings, surface: Optional[DisplaySurface] = None) -> RefreshScheduler:
    """Wire a RefreshScheduler and its collaborators from settings."""
    client = JSONHTTPClient(timeout=cfg.request_timeout)
    cache = RateCache(JsonFileStore(cfg.cache_file), cfg.cache_key, cfg.rate_cache_ttl_ms)

    rate_fetcher = ExchangeRateFetcher(
        client,
        cache,
        url=cfg.rate_url,
        rate_path=cfg.rate_path_list,
        default_rate=cfg.default_usd_rub_rate,
    )
    price_fetcher = PriceFetcher(
        client,
        [
            PriceSource(
                name="primary_price",
                url=cfg.primary_price_url,
                price_field=cfg.primary_price_field,
                volume_field=cfg.primary_volume_field,
            ),
            PriceSource(
                name="fallback_price",
                url=cfg.fallback_price_url,
                price_field=cfg.fallback_price_field,
                volume_field=cfg.fallback_volume_field,
            ),
        ],
    )
    renderer = TableRenderer(
        surface or DisplaySurface(),
        refresh_interval_seconds=cfg.refresh_interval_seconds,
        rate_cache_ttl_seconds=cfg.rate_cache_ttl_seconds,
    )

    return RefreshScheduler(
        rate_fetcher,
        price_fetcher,
        renderer,
        interval_seconds=cfg.refresh_interval_seconds,
        http_client=client,
    )


_refresh_scheduler: Optional[RefreshScheduler] = None


def get_refresh_scheduler() -> RefreshScheduler:
    global _refresh_scheduler
    if _refresh_scheduler is None:
        _refresh_scheduler = build_refresh_scheduler()
    return _refresh_scheduler
