"""
Wall-clock traffic series for live polling.

When snapshots arrive from a periodic poll, each completed poll becomes
one point of the traffic chart, labelled with the time of day of the
snapshot. This is the counterpart of the row-position bins used for a
static CSV snapshot (see aggregator.row_traffic_bins).
"""

import threading
from collections import deque
from datetime import datetime
from enum import Enum
from typing import List, Sequence

import numpy as np

from flightdash.analytics.aggregator import active_count, round_half_up
from flightdash.models import FlightState, TrafficPoint


class BinningMode(str, Enum):
    """
    How the traffic series is built.

    - ROWS: fixed slices of one snapshot's rows, labelled by position
    - SAMPLES: one point per poll, labelled by wall-clock time
    """
    ROWS = 'rows'
    SAMPLES = 'samples'


def rolling_average(values: Sequence[int], window: int) -> List[int]:
    """
    Trailing mean over up to `window` values, rounded half-up.

    Series of two points or fewer, or a window of 1, are returned as-is.
    """
    if window <= 1 or len(values) <= 2:
        return list(values)

    arr = np.asarray(values, dtype=np.float64)
    cumulative = np.concatenate(([0.0], np.cumsum(arr)))
    out = []
    for i in range(len(arr)):
        start = max(0, i - window + 1)
        mean = (cumulative[i + 1] - cumulative[start]) / (i + 1 - start)
        out.append(round_half_up(mean))
    return out


class TrafficSeries:
    """
    Bounded history of per-poll airborne counts.

    Thread-safe: the poller appends from its background thread while
    API handlers read.
    """

    def __init__(self, max_points: int = 60, smoothing: int = 2):
        self.max_points = max_points
        self.smoothing = smoothing
        self._samples: deque = deque(maxlen=max_points)
        self._lock = threading.Lock()

    def record(self, timestamp: int, flights: Sequence[FlightState]) -> None:
        """
        Add one sample for a completed poll.

        Snapshots without a timestamp are ignored.
        """
        if not timestamp:
            return
        label = datetime.fromtimestamp(timestamp).strftime('%H:%M')
        with self._lock:
            self._samples.append((label, active_count(flights)))

    def points(self) -> List[TrafficPoint]:
        """Current series, oldest first, smoothed if configured."""
        with self._lock:
            samples = list(self._samples)

        counts = rolling_average([count for _, count in samples], self.smoothing)
        return [
            TrafficPoint(label=label, airborne_count=count)
            for (label, _), count in zip(samples, counts)
        ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)
