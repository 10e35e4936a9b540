import time

import requests

from flightdash.analytics import BinningMode
from flightdash.ingestion.opensky_client import BoundingBox, RateLimitedError
from flightdash.ingestion.providers import CsvSnapshotProvider, OpenSkySnapshotProvider

HEADER = 'time,icao24,lat,lon,velocity,heading,geoaltitude,on_ground,callsign'


class FakeOpenSkyClient:
    def __init__(self, states=None, fail=None):
        self.states = states or []
        self.fail = fail
        self.bboxes = []

    def get_states(self, bbox=None):
        self.bboxes.append(bbox)
        if self.fail:
            raise self.fail
        return 1_700_000_123, self.states


def test_csv_provider_reads_file(tmp_path):
    path = tmp_path / 'states.csv'
    path.write_text('\n'.join([
        HEADER,
        '1700000042,abc,1,2,3,4,5,false,UAL1',
        '1700000001,def,1,2,3,4,5,true,DAL2',
    ]))
    provider = CsvSnapshotProvider(path=str(path))

    snapshot = provider.fetch()

    assert snapshot.ok
    assert len(snapshot.flights) == 2
    assert snapshot.timestamp == 1700000042
    assert provider.binning_mode == BinningMode.ROWS


def test_csv_provider_missing_file_is_empty_not_error(tmp_path):
    provider = CsvSnapshotProvider(path=str(tmp_path / 'missing.csv'))
    before = int(time.time())

    snapshot = provider.fetch()

    assert snapshot.flights == []
    assert snapshot.error is None
    assert snapshot.timestamp >= before


def test_csv_provider_unreadable_source_soft_fails(tmp_path):
    provider = CsvSnapshotProvider(path=str(tmp_path))  # a directory

    snapshot = provider.fetch()

    assert snapshot.flights == []
    assert snapshot.error
    assert snapshot.to_dict()['error'] == snapshot.error


def test_csv_provider_respects_row_cap(tmp_path):
    path = tmp_path / 'states.csv'
    rows = [f'17000000{i:02d},ic{i},1,2,3,4,5,false,UAL{i}' for i in range(20)]
    path.write_text('\n'.join([HEADER] + rows))

    snapshot = CsvSnapshotProvider(path=str(path), max_rows=5).fetch()

    assert len(snapshot.flights) == 5


def test_opensky_provider_success(make_flight):
    client = FakeOpenSkyClient(states=[make_flight()])
    provider = OpenSkySnapshotProvider(client=client, region_filter='45.8,5.9,47.8,10.5')

    snapshot = provider.fetch()

    assert snapshot.ok
    assert snapshot.timestamp == 1_700_000_123
    assert len(snapshot.flights) == 1
    assert client.bboxes[0] == BoundingBox(lat_min=45.8, lat_max=47.8, lon_min=5.9, lon_max=10.5)
    assert provider.binning_mode == BinningMode.SAMPLES


def test_opensky_provider_rate_limited():
    provider = OpenSkySnapshotProvider(client=FakeOpenSkyClient(fail=RateLimitedError('rate_limited')))

    snapshot = provider.fetch()

    assert snapshot.rate_limited
    assert snapshot.error == 'rate_limited'
    assert snapshot.flights == []


def test_opensky_provider_network_error_soft_fails():
    failure = requests.ConnectionError('connection refused')
    provider = OpenSkySnapshotProvider(client=FakeOpenSkyClient(fail=failure))

    snapshot = provider.fetch()

    assert not snapshot.rate_limited
    assert snapshot.error == 'connection refused'
    assert snapshot.flights == []


def test_bounding_box_from_string():
    assert BoundingBox.from_string(None) is None
    assert BoundingBox.from_string('1,2,3') is None
    assert BoundingBox.from_string('a,b,c,d') is None

    bbox = BoundingBox.from_string(' 45.8, 5.9 ,47.8,10.5')
    assert bbox.to_params() == {'lamin': 45.8, 'lamax': 47.8, 'lomin': 5.9, 'lomax': 10.5}


def test_csv_provider_explicit_zero_row_cap(tmp_path):
    path = tmp_path / 'states.csv'
    path.write_text('\n'.join([HEADER, '1700000000,abc,1,2,3,4,5,false,UAL1']))

    provider = CsvSnapshotProvider(path=str(path), max_rows=0)
    snapshot = provider.fetch()

    assert provider.max_rows == 0
    assert snapshot.flights == []
    assert snapshot.error is None


def test_opensky_provider_malformed_payload_soft_fails():
    failure = ValueError('unexpected OpenSky payload')
    provider = OpenSkySnapshotProvider(client=FakeOpenSkyClient(fail=failure))

    snapshot = provider.fetch()

    assert not snapshot.rate_limited
    assert snapshot.error == 'unexpected OpenSky payload'
    assert snapshot.flights == []
