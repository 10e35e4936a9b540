"""
OpenSky Network API client.

Handles communication with the OpenSky REST API, including:
- Authentication (optional but recommended for higher rate limits)
- Bounding box queries for regional filtering
- Rate limit detection (HTTP 429)

OpenSky state vector format (array indices):
0: icao24          - ICAO24 hex address
1: callsign        - Callsign (8 chars max)
2: origin_country  - Country of registration
3: time_position   - Unix timestamp of last position update
4: last_contact    - Unix timestamp of last message
5: longitude       - WGS84 longitude
6: latitude        - WGS84 latitude
7: baro_altitude   - Barometric altitude (meters)
8: on_ground       - Boolean
9: velocity        - Ground speed (m/s)
10: true_track     - Track angle (degrees, 0=north)
11: vertical_rate  - Vertical rate (m/s)
12: sensors        - Sensor IDs (array)
13: geo_altitude   - Geometric altitude (meters)
14: squawk         - Transponder code
15: spi            - Special position indicator
16: position_source - 0=ADS-B, 1=ASTERIX, 2=MLAT, 3=FLARM
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Optional, List, Tuple, Any

import requests
from requests.auth import HTTPBasicAuth

from flightdash.config import config
from flightdash.models import FlightState

logger = logging.getLogger(__name__)


class RateLimitedError(Exception):
    """Raised when OpenSky answers with HTTP 429."""


@dataclass
class BoundingBox:
    """
    Geographic bounding box for API queries.

    OpenSky expects: lamin, lomin, lamax, lomax
    (latitude min, longitude min, latitude max, longitude max)
    """
    lat_min: float
    lat_max: float
    lon_min: float
    lon_max: float

    @classmethod
    def from_string(cls, value: Optional[str]) -> Optional['BoundingBox']:
        """
        Parse a 'lamin,lomin,lamax,lomax' region filter.

        Returns None if empty or invalid.
        """
        if not value:
            return None
        try:
            lat_min, lon_min, lat_max, lon_max = (float(v.strip()) for v in value.split(','))
        except (ValueError, AttributeError):
            logger.warning(f'Ignoring invalid region filter: {value!r}')
            return None
        return cls(lat_min=lat_min, lat_max=lat_max, lon_min=lon_min, lon_max=lon_max)

    def to_params(self) -> dict:
        """Convert to OpenSky API query parameters."""
        return {
            'lamin': self.lat_min,
            'lamax': self.lat_max,
            'lomin': self.lon_min,
            'lomax': self.lon_max,
        }


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def state_from_array(arr: List[Any]) -> Optional[FlightState]:
    """
    Parse an OpenSky state vector array into a FlightState.

    Returns None if the array is malformed or has no icao24.
    """
    if not isinstance(arr, (list, tuple)) or len(arr) < 17:
        return None

    icao24 = arr[0]
    if not icao24 or not isinstance(icao24, str):
        return None

    last_contact = _as_float(arr[4])
    squawk = arr[14]

    return FlightState(
        icao24=icao24.lower(),
        callsign=arr[1].strip() if isinstance(arr[1], str) else '',
        country=arr[2] if isinstance(arr[2], str) else '',
        last_contact=int(last_contact) if last_contact is not None else 0,
        lon=_as_float(arr[5]),
        lat=_as_float(arr[6]),
        baro_altitude=_as_float(arr[7]),
        on_ground=bool(arr[8]),
        velocity_ms=_as_float(arr[9]),
        heading=_as_float(arr[10]),
        geo_altitude=_as_float(arr[13]),
        squawk=str(squawk) if squawk else None,
    )


class OpenSkyClient:
    """
    Client for OpenSky Network API.

    Handles:
    - GET requests to /states/all endpoint
    - Optional authentication for higher rate limits
    - Bounding box filtering
    - Minimum spacing between requests
    """

    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        base_url: str = 'https://opensky-network.org/api',
        timeout: int = 30,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.auth = None
        if username and password:
            self.auth = HTTPBasicAuth(username, password)
            logger.info('OpenSky client initialized with authentication')
        else:
            logger.warning('OpenSky client running without authentication (lower rate limits)')

        self.session = requests.Session()
        self.last_request_time: float = 0
        self._min_interval = 5.0 if self.auth else 10.0

    @classmethod
    def from_config(cls) -> 'OpenSkyClient':
        """Create client from application configuration."""
        return cls(
            username=config.opensky.username,
            password=config.opensky.password,
            base_url=config.opensky.base_url,
            timeout=config.opensky.timeout_seconds,
        )

    def _wait_for_rate_limit(self) -> None:
        """
        Enforce minimum interval between requests.

        OpenSky rate limits:
        - Anonymous: ~10 seconds between requests
        - Authenticated: ~5 seconds between requests
        """
        elapsed = time.time() - self.last_request_time
        if elapsed < self._min_interval:
            sleep_time = self._min_interval - elapsed
            logger.debug(f'Rate limiting: sleeping {sleep_time:.1f}s')
            time.sleep(sleep_time)

    def get_states(
        self,
        bbox: Optional[BoundingBox] = None,
    ) -> Tuple[int, List[FlightState]]:
        """
        Fetch current state vectors from OpenSky.

        Args:
            bbox: Optional bounding box to filter by geography

        Returns:
            Tuple of (api_timestamp, list of FlightStates)
            api_timestamp is the OpenSky server time for this snapshot

        Raises:
            RateLimitedError on HTTP 429
            ValueError on a body that is not a JSON object
            requests.RequestException on other network/API errors
        """
        self._wait_for_rate_limit()

        url = f'{self.base_url}/states/all'
        params = bbox.to_params() if bbox else {}

        logger.debug(f'Fetching states: {url} params={params}')

        try:
            response = self.session.get(
                url,
                params=params,
                auth=self.auth,
                timeout=self.timeout,
            )
            self.last_request_time = time.time()

            if response.status_code == 429:
                logger.warning('OpenSky rate limit exceeded')
                raise RateLimitedError('rate_limited')

            response.raise_for_status()
            data = response.json()

        except requests.exceptions.Timeout:
            logger.error('OpenSky API timeout')
            raise
        except requests.exceptions.HTTPError as e:
            logger.error(f'OpenSky API error: {e.response.status_code}')
            raise
        except requests.exceptions.RequestException as e:
            logger.error(f'OpenSky request failed: {e}')
            raise

        if not isinstance(data, dict):
            logger.error(f'Unexpected OpenSky payload: {type(data).__name__}')
            raise ValueError('unexpected OpenSky payload')

        api_time = _as_float(data.get('time')) or time.time()
        states_raw = data.get('states')
        if not isinstance(states_raw, list):
            states_raw = []

        logger.info(f'Received {len(states_raw)} state vectors from OpenSky')

        states = []
        for arr in states_raw:
            state = state_from_array(arr)
            if state:
                states.append(state)

        logger.debug(f'Parsed {len(states)} valid state vectors')

        return int(api_time), states
