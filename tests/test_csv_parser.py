import pytest

from flightdash.ingestion.csv_parser import (
    build_column_index,
    parse_states_csv,
    read_states_file,
)

HEADER = 'time,icao24,lat,lon,velocity,heading,geoaltitude,on_ground,callsign'


def test_parses_well_formed_rows():
    text = '\n'.join([
        HEADER,
        '1700000000,4ca1b2,53.42,-6.27,210.5,270.0,10972.8,False,EIN12A  ',
        '1700000005,a0b1c2,40.64,-73.78,0.0,45.0,3.0,True,DAL404',
    ])

    flights = parse_states_csv(text)

    assert len(flights) == 2
    first = flights[0]
    assert first.icao24 == '4ca1b2'
    assert first.callsign == 'EIN12A'
    assert first.last_contact == 1700000000
    assert first.lat == pytest.approx(53.42)
    assert first.lon == pytest.approx(-6.27)
    assert first.velocity_ms == pytest.approx(210.5)
    assert first.heading == pytest.approx(270.0)
    assert first.geo_altitude == pytest.approx(10972.8)
    assert first.on_ground is False
    assert first.country == ''
    assert first.baro_altitude is None
    assert first.squawk is None
    assert flights[1].on_ground is True


def test_short_rows_are_discarded():
    text = '\n'.join([HEADER, 'AB12,,,', '1700000000,abc,1,2,3,4,5,false,UAL1'])

    flights = parse_states_csv(text)

    assert [f.icao24 for f in flights] == ['abc']


def test_empty_and_unparsable_numbers_become_none():
    text = '\n'.join([
        HEADER,
        '1700000000,abc,,north,nan,inf,,false,UAL1',
    ])

    flight = parse_states_csv(text)[0]

    assert flight.lat is None
    assert flight.lon is None
    assert flight.velocity_ms is None
    assert flight.heading is None
    assert flight.geo_altitude is None


def test_zero_is_kept_distinct_from_missing():
    text = '\n'.join([HEADER, '1700000000,abc,0,0,0,0,0,true,UAL1'])

    flight = parse_states_csv(text)[0]

    assert flight.geo_altitude == 0.0
    assert flight.velocity_ms == 0.0
    assert flight.has_position()


def test_unparsable_time_defaults_to_zero():
    text = '\n'.join([HEADER, 'soon,abc,1,2,3,4,5,false,UAL1'])

    assert parse_states_csv(text)[0].last_contact == 0


@pytest.mark.parametrize('raw, expected', [
    ('true', True),
    ('TRUE', True),
    ('True', True),
    ('false', False),
    ('1', False),
    ('yes', False),
    ('', False),
])
def test_on_ground_is_exact_case_insensitive_true(raw, expected):
    text = '\n'.join([HEADER, f'1700000000,abc,1,2,3,4,5,{raw},UAL1'])

    assert parse_states_csv(text)[0].on_ground is expected


def test_missing_header_column_reads_as_absent():
    header = 'time,icao24,lat,lon,velocity,on_ground,callsign'
    text = '\n'.join([header, '1700000000,abc,1.5,2.5,100,false,UAL1'])

    flight = parse_states_csv(text)[0]

    assert build_column_index(header)['heading'] == -1
    assert flight.heading is None
    assert flight.geo_altitude is None
    assert flight.lat == pytest.approx(1.5)
    assert flight.callsign == 'UAL1'


def test_row_shorter_than_header_reads_trailing_fields_as_absent():
    text = '\n'.join([HEADER, '1700000000,abc,1,2,3,4'])

    flight = parse_states_csv(text)[0]

    assert flight.heading == 4.0
    assert flight.geo_altitude is None
    assert flight.on_ground is False
    assert flight.callsign == ''


def test_handles_crlf_and_blank_lines():
    text = HEADER + '\r\n1700000000,abc,1,2,3,4,5,false,UAL1\r\n\r\n'

    flights = parse_states_csv(text)

    assert len(flights) == 1
    assert flights[0].callsign == 'UAL1'


def test_rows_beyond_cap_are_ignored():
    rows = [f'{1700000000 + i},icao{i},1,2,3,4,5,false,UAL{i}' for i in range(10)]
    text = '\n'.join([HEADER] + rows)

    flights = parse_states_csv(text, max_rows=4)

    assert [f.icao24 for f in flights] == ['icao0', 'icao1', 'icao2', 'icao3']


def test_empty_text_yields_no_records():
    assert parse_states_csv('') == []
    assert parse_states_csv(HEADER) == []


def test_duplicates_are_not_deduplicated():
    row = '1700000000,abc,1,2,3,4,5,false,UAL1'
    flights = parse_states_csv('\n'.join([HEADER, row, row]))

    assert len(flights) == 2


def test_read_states_file_strips_byte_order_mark(tmp_path):
    path = tmp_path / 'states.csv'
    path.write_text('\ufeff' + HEADER + '\n1700000000,abc,1,2,3,4,5,false,UAL1\n', encoding='utf-8')

    flights = read_states_file(str(path))

    assert flights[0].last_contact == 1700000000


def test_read_states_file_missing_raises(tmp_path):
    with pytest.raises(OSError):
        read_states_file(str(tmp_path / 'nope.csv'))


def test_read_states_file_survives_invalid_utf8(tmp_path):
    path = tmp_path / 'states.csv'
    path.write_bytes(b'\n'.join([
        HEADER.encode('ascii'),
        b'1700000000,abc,1,2,3,4,5,false,UA\xffL1',
        b'1700000001,def,1,2,3,4,5,true,DAL2',
    ]))

    flights = read_states_file(str(path))

    assert len(flights) == 2
    assert flights[0].callsign == 'UA\ufffdL1'
    assert flights[1].callsign == 'DAL2'
