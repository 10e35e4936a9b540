import pytest

from flightdash.analytics import BinningMode
from flightdash.ingestion.providers import Snapshot
from flightdash.models import FlightState


def build_flight(**overrides) -> FlightState:
    values = {
        'icao24': 'abc123',
        'callsign': 'UAL123',
        'country': '',
        'last_contact': 1_700_000_000,
        'lon': -122.3,
        'lat': 37.6,
        'baro_altitude': None,
        'on_ground': False,
        'velocity_ms': 230.0,
        'heading': 90.0,
        'geo_altitude': 10_000.0,
        'squawk': None,
    }
    values.update(overrides)
    return FlightState(**values)


class FakeProvider:
    """Hands out queued snapshots; repeats the last one when exhausted."""

    def __init__(self, snapshots=None, binning_mode=BinningMode.ROWS, fail=None):
        self.snapshots = list(snapshots or [])
        self.binning_mode = binning_mode
        self.fail = fail
        self.call_count = 0

    def fetch(self) -> Snapshot:
        self.call_count += 1
        if self.fail:
            raise self.fail
        if len(self.snapshots) > 1:
            return self.snapshots.pop(0)
        if self.snapshots:
            return self.snapshots[0]
        return Snapshot(timestamp=0)


@pytest.fixture
def make_flight():
    return build_flight


@pytest.fixture
def sample_flights():
    return [
        build_flight(icao24='a1', callsign='UAL123', on_ground=False, last_contact=100),
        build_flight(icao24='a2', callsign='UAL456', on_ground=False, last_contact=200),
        build_flight(icao24='a3', callsign='DAL10', on_ground=True, last_contact=50,
                     velocity_ms=0.0, geo_altitude=5.0),
    ]
