"""
Data ingestion module for FlightDash.

Handles reading CSV snapshots, polling the OpenSky API and feeding
each batch through aggregation into the dashboard cache.
"""

from flightdash.ingestion.csv_parser import parse_states_csv, read_states_file
from flightdash.ingestion.opensky_client import OpenSkyClient, RateLimitedError
from flightdash.ingestion.providers import (
    CsvSnapshotProvider,
    OpenSkySnapshotProvider,
    Snapshot,
    provider_from_config,
)
from flightdash.ingestion.poller import SnapshotPoller

__all__ = [
    'parse_states_csv',
    'read_states_file',
    'OpenSkyClient',
    'RateLimitedError',
    'CsvSnapshotProvider',
    'OpenSkySnapshotProvider',
    'Snapshot',
    'provider_from_config',
    'SnapshotPoller',
]
