"""
Snapshot providers.

A provider supplies one batch of flight states plus a timestamp. Two
sources exist:

- CsvSnapshotProvider: static file on disk, binned by row position
- OpenSkySnapshotProvider: live OpenSky poll, binned by wall-clock time

Both soft-fail: a missing file, network error or throttling answer
yields an empty Snapshot with `error` set, never an exception.
"""

import logging
import os
import time
from dataclasses import dataclass, field
from typing import List, Optional

import requests

from flightdash.analytics.traffic import BinningMode
from flightdash.config import config
from flightdash.ingestion.csv_parser import read_states_file
from flightdash.ingestion.opensky_client import BoundingBox, OpenSkyClient, RateLimitedError
from flightdash.models import FlightState

logger = logging.getLogger(__name__)

RATE_LIMITED = 'rate_limited'


@dataclass(frozen=True)
class Snapshot:
    """One batch of flight-state records plus its timestamp."""
    timestamp: int
    flights: List[FlightState] = field(default_factory=list)
    error: Optional[str] = None
    rate_limited: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        result = {
            'time': self.timestamp,
            'flights': [f.to_dict() for f in self.flights],
        }
        if self.error:
            result['error'] = self.error
        return result


def _now() -> int:
    return int(time.time())


class CsvSnapshotProvider:
    """Reads a static CSV snapshot on every fetch."""

    binning_mode = BinningMode.ROWS

    def __init__(self, path: Optional[str] = None, max_rows: Optional[int] = None):
        self.path = path or config.snapshot.csv_path
        self.max_rows = max_rows if max_rows is not None else config.snapshot.max_rows

    def fetch(self) -> Snapshot:
        """
        Load the CSV snapshot.

        A missing file is an empty snapshot, not an error. The snapshot
        timestamp is the first record's last_contact.
        """
        if not os.path.exists(self.path):
            logger.warning(f'Snapshot file not found: {self.path}')
            return Snapshot(timestamp=_now())

        try:
            flights = read_states_file(self.path, max_rows=self.max_rows)
        except (OSError, ValueError) as e:
            logger.error(f'Failed to read snapshot {self.path}: {e}')
            return Snapshot(timestamp=_now(), error=str(e) or 'read_error')

        logger.info(f'Loaded {len(flights)} flight states from {self.path}')
        timestamp = flights[0].last_contact if flights else _now()
        return Snapshot(timestamp=timestamp, flights=flights)


class OpenSkySnapshotProvider:
    """Fetches current state vectors from OpenSky on every fetch."""

    binning_mode = BinningMode.SAMPLES

    def __init__(
        self,
        client: Optional[OpenSkyClient] = None,
        region_filter: Optional[str] = None,
    ):
        self.client = client or OpenSkyClient.from_config()
        self.bbox = BoundingBox.from_string(region_filter)

    def fetch(self) -> Snapshot:
        try:
            api_time, flights = self.client.get_states(bbox=self.bbox)
        except RateLimitedError:
            return Snapshot(timestamp=_now(), error=RATE_LIMITED, rate_limited=True)
        except (requests.RequestException, ValueError) as e:
            return Snapshot(timestamp=_now(), error=str(e) or 'fetch_error')

        return Snapshot(timestamp=api_time, flights=flights)


def provider_from_config():
    """Build the snapshot provider selected by SNAPSHOT_SOURCE."""
    if config.snapshot.is_live:
        return OpenSkySnapshotProvider(region_filter=config.polling.region_filter)
    return CsvSnapshotProvider()
