"""
CSV snapshot parser.

Turns a comma-delimited state-vector dump into FlightState records.

Expected header columns (any order, extra columns ignored):
    time, icao24, lat, lon, velocity, heading, geoaltitude, on_ground, callsign

The feed is assumed to be plain CSV without quoting, so rows are split
on bare commas. Parsing is best-effort: a bad field becomes None and a
short row is dropped, but one bad row never fails the whole batch.
"""

import logging
import math
import re
from typing import Dict, List, Optional

from flightdash.models import FlightState

logger = logging.getLogger(__name__)

# Hard cap on data lines per snapshot to bound memory and latency
MAX_ROWS = 50000

# Rows with fewer fields than this are discarded
MIN_FIELDS = 6

COLUMNS = (
    'time', 'icao24', 'lat', 'lon', 'velocity',
    'heading', 'geoaltitude', 'on_ground', 'callsign',
)

_LINE_BREAK = re.compile(r'\r\n|\r|\n')


def _to_float(value: str) -> Optional[float]:
    """Parse a numeric field, or None if empty or not a finite number."""
    if not value or not value.strip():
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _to_int(value: str, default: int = 0) -> int:
    number = _to_float(value)
    return int(number) if number is not None else default


def _field(columns: List[str], index: int) -> str:
    """Read a column by index; unknown (-1) or out-of-range reads are empty."""
    if index < 0 or index >= len(columns):
        return ''
    return columns[index]


def build_column_index(header_line: str) -> Dict[str, int]:
    """Map each expected column name to its position, -1 when absent."""
    header = header_line.split(',') if header_line else []
    return {
        name: header.index(name) if name in header else -1
        for name in COLUMNS
    }


def parse_row(columns: List[str], index: Dict[str, int]) -> FlightState:
    """Build a FlightState from one already-split data row."""
    def get(name: str) -> str:
        return _field(columns, index[name])

    return FlightState(
        icao24=get('icao24'),
        callsign=get('callsign').strip(),
        country='',  # not present in this feed
        last_contact=_to_int(get('time')),
        lon=_to_float(get('lon')),
        lat=_to_float(get('lat')),
        baro_altitude=None,
        on_ground=get('on_ground').lower() == 'true',
        velocity_ms=_to_float(get('velocity')),
        heading=_to_float(get('heading')),
        geo_altitude=_to_float(get('geoaltitude')),
        squawk=None,
    )


def parse_states_csv(text: str, max_rows: int = MAX_ROWS) -> List[FlightState]:
    """
    Parse a CSV snapshot into FlightState records.

    Args:
        text: Full file contents, header line first
        max_rows: Data lines beyond this count are silently ignored

    Returns:
        Records in input order. Empty lines and rows with fewer than
        MIN_FIELDS fields are skipped.
    """
    lines = _LINE_BREAK.split(text or '')
    header_line, rows = lines[0], lines[1:]
    index = build_column_index(header_line)

    missing = [name for name, i in index.items() if i < 0]
    if missing and header_line:
        logger.warning(f'CSV header missing columns: {", ".join(missing)}')

    flights = []
    skipped = 0
    for line in rows[:max_rows]:
        if not line:
            continue
        columns = line.split(',')
        if len(columns) < MIN_FIELDS:
            skipped += 1
            continue
        flights.append(parse_row(columns, index))

    if len(rows) > max_rows:
        logger.debug(f'Ignored {len(rows) - max_rows} lines beyond row cap {max_rows}')
    if skipped:
        logger.debug(f'Discarded {skipped} malformed rows')

    return flights


def read_states_file(path: str, max_rows: int = MAX_ROWS) -> List[FlightState]:
    """
    Read and parse a CSV snapshot file.

    Raises OSError if the file cannot be read; callers decide how to
    degrade.
    """
    with open(path, 'r', encoding='utf-8-sig', errors='replace') as f:
        text = f.read()
    return parse_states_csv(text, max_rows=max_rows)
