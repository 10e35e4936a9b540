"""
Snapshot poller - drives data flow from a provider to the dashboard.

Pipeline stages per tick:
1. Fetch: ask the provider for a snapshot (soft-fails, never raises)
2. Sample: append a wall-clock traffic point when polling live data
3. Aggregate: compute the AggregateView
4. Publish: swap the view into the DashboardCache

Throttling: when the provider reports a rate limit, fetches are
suspended for a fixed cooldown window. The pause deadline lives on the
poller instance, so independent pollers never share it.
"""

import logging
import threading
import time
from typing import Callable, List, Optional

from flightdash.analytics import Aggregator, BinningMode, TrafficSeries
from flightdash.cache import DashboardCache
from flightdash.config import config
from flightdash.ingestion.providers import RATE_LIMITED
from flightdash.models import AggregateView

logger = logging.getLogger(__name__)


class SnapshotPoller:
    """
    Manages the snapshot polling lifecycle.

    Can run as a background thread for continuous polling, or be driven
    manually through poll_once().
    """

    def __init__(
        self,
        provider,
        cache: DashboardCache,
        aggregator: Optional[Aggregator] = None,
        interval_seconds: Optional[float] = None,
        cooldown_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the poller.

        Args:
            provider: Snapshot provider (fetch() and binning_mode)
            cache: Dashboard cache receiving each new view
            aggregator: Aggregator (created from config if None)
            interval_seconds: Seconds between polls
            cooldown_seconds: Pause after a rate-limit answer
            clock: Time source, injectable for tests
        """
        self.provider = provider
        self.cache = cache
        self.aggregator = aggregator or Aggregator.from_config()
        self.interval_seconds = interval_seconds or config.polling.interval_seconds
        if cooldown_seconds is None:
            cooldown_seconds = config.polling.rate_limit_cooldown_seconds
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock

        # Live sources chart one point per poll instead of row bins
        self.traffic: Optional[TrafficSeries] = None
        if provider.binning_mode == BinningMode.SAMPLES:
            self.traffic = TrafficSeries(
                max_points=config.aggregation.traffic_max_points,
                smoothing=config.aggregation.traffic_smoothing,
            )

        # State tracking
        self.paused_until: float = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last_fetch_time: float = 0
        self._fetch_count: int = 0
        self._error_count: int = 0
        self._skipped_count: int = 0

        # Callbacks for external integration
        self._on_update_callbacks: List[Callable[[AggregateView], None]] = []

    def add_update_callback(self, callback: Callable[[AggregateView], None]) -> None:
        """
        Register callback to be invoked after each successful snapshot.

        Callback receives the new AggregateView.
        """
        self._on_update_callbacks.append(callback)

    @property
    def is_paused(self) -> bool:
        return self._clock() < self.paused_until

    def poll_once(self) -> int:
        """
        Execute one polling cycle.

        Returns count of flight states processed, or -1 when the cycle
        was skipped or failed.
        """
        if self.is_paused:
            self._skipped_count += 1
            logger.debug(f'Rate-limit cooldown active, skipping fetch '
                         f'({self.paused_until - self._clock():.0f}s left)')
            return -1

        try:
            snapshot = self.provider.fetch()
            self._last_fetch_time = self._clock()
            self._fetch_count += 1

            if snapshot.rate_limited:
                self.paused_until = self._clock() + self.cooldown_seconds
                self._error_count += 1
                self.cache.mark_error(RATE_LIMITED, rate_limited=True)
                logger.warning(f'Rate limited, pausing fetches for {self.cooldown_seconds}s')
                return -1

            if not snapshot.ok:
                self._error_count += 1
                self.cache.mark_error(snapshot.error)
                logger.warning(f'Snapshot failed: {snapshot.error}')
                return -1

            traffic = None
            if self.traffic is not None:
                self.traffic.record(snapshot.timestamp, snapshot.flights)
                traffic = self.traffic.points()

            view = self.aggregator.compute(snapshot.flights, traffic=traffic)
            self.cache.publish(snapshot.timestamp, snapshot.flights, view)

        except Exception as e:
            self._error_count += 1
            self.cache.mark_error(str(e) or 'poll_error')
            logger.error(f'Polling error: {e}')
            return -1

        logger.info(f'Processed {len(snapshot.flights)} flight states '
                    f'({view.active_count} airborne)')

        # Notify callbacks
        for callback in self._on_update_callbacks:
            try:
                callback(view)
            except Exception as e:
                logger.error(f'Update callback error: {e}')

        return len(snapshot.flights)

    def run_continuous(self, interval: Optional[float] = None) -> None:
        """
        Run polling loop until stop() is called.

        This method blocks - use start_background() for non-blocking.
        """
        interval = interval or self.interval_seconds

        logger.info(f'Starting continuous polling (interval={interval}s)')

        while not self._stop_event.is_set():
            self.poll_once()
            self._stop_event.wait(interval)

        logger.info('Polling stopped')

    def start_background(self, interval: Optional[float] = None) -> None:
        """Start polling in background thread."""
        if self._thread and self._thread.is_alive():
            logger.warning('Polling already running')
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run_continuous,
            args=(interval,),
            daemon=True,
        )
        self._thread.start()
        logger.info('Background polling started')

    def stop(self) -> None:
        """Stop background polling."""
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5)

    @property
    def running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    @property
    def stats(self) -> dict:
        """Get polling statistics."""
        return {
            'fetch_count': self._fetch_count,
            'error_count': self._error_count,
            'skipped_count': self._skipped_count,
            'last_fetch_time': self._last_fetch_time,
            'paused_until': self.paused_until,
            'binning_mode': self.provider.binning_mode.value,
            'traffic_points': len(self.traffic) if self.traffic is not None else 0,
            'running': self.running,
        }
