"""
In-memory dashboard state shared between the poller and the API.

Holds the latest AggregateView together with the status of the last
snapshot attempt (loading / error / rate limited) and the presentation
cursor over the recent-airborne selection.

Design rationale:
Views are immutable and replaced wholesale on every batch, so readers
never observe a half-updated view. The lock only guards the swap and
the cursor, keeping reads effectively free for the API layer.
"""

import logging
import threading
import time
from typing import List, Optional, Tuple

from flightdash.models import AggregateView, FlightState

logger = logging.getLogger(__name__)


class DashboardCache:
    """
    Thread-safe holder of the latest dashboard view.

    One instance per application; the poller writes, API handlers read.
    """

    def __init__(self):
        self._view = AggregateView()
        self._flights: List[FlightState] = []
        self._timestamp: int = 0
        self._loading = True
        self._error: Optional[str] = None
        self._rate_limited = False
        self._cursor = 0
        self._lock = threading.RLock()
        self._last_refresh: float = 0
        self._refresh_count = 0

    def publish(self, timestamp: int, flights: List[FlightState], view: AggregateView) -> None:
        """Replace the current view after a successful snapshot."""
        with self._lock:
            self._view = view
            self._flights = list(flights)
            self._timestamp = timestamp
            self._loading = False
            self._error = None
            self._rate_limited = False
            self._last_refresh = time.time()
            self._refresh_count += 1

        logger.debug(f'Dashboard refreshed with {len(flights)} flights')

    def mark_error(self, error: str, rate_limited: bool = False) -> None:
        """
        Record a failed snapshot attempt.

        The previous view stays in place (stale but consistent).
        """
        with self._lock:
            self._loading = False
            self._error = error
            self._rate_limited = rate_limited

    @property
    def view(self) -> AggregateView:
        with self._lock:
            return self._view

    @property
    def flights(self) -> List[FlightState]:
        with self._lock:
            return list(self._flights)

    @property
    def timestamp(self) -> int:
        with self._lock:
            return self._timestamp

    @property
    def loading(self) -> bool:
        with self._lock:
            return self._loading

    @property
    def error(self) -> Optional[str]:
        with self._lock:
            return self._error

    @property
    def status(self) -> str:
        """One of 'loading', 'ok', 'error', 'rate_limited'."""
        with self._lock:
            if self._rate_limited:
                return 'rate_limited'
            if self._error:
                return 'error'
            if self._loading:
                return 'loading'
            return 'ok'

    def select(self, step: int = 0) -> Tuple[Optional[FlightState], int, int]:
        """
        Move the presentation cursor and return the selected flight.

        The cursor wraps over recent_airborne in both directions. With
        nothing recent, the view's current_flight is returned instead.

        Returns (flight, index, total).
        """
        with self._lock:
            recent = self._view.recent_airborne
            if not recent:
                self._cursor = 0
                return self._view.current_flight, 0, 0

            self._cursor = (self._cursor + step) % len(recent)
            return recent[self._cursor], self._cursor, len(recent)

    @property
    def stats(self) -> dict:
        """Get cache statistics."""
        with self._lock:
            return {
                'flights': len(self._flights),
                'refresh_count': self._refresh_count,
                'last_refresh': self._last_refresh,
                'snapshot_time': self._timestamp,
            }
