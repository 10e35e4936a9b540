"""
FlightState model - one observation of one aircraft.

Records are created fresh from every snapshot and discarded when the
next one arrives. There is no cross-snapshot identity: the same icao24
may appear several times in one batch and no deduplication is done.

Design notes:
- Optional telemetry is None when the source omitted it or it could
  not be parsed. None is never coerced to 0, so "no altitude" and
  "altitude 0" stay distinguishable downstream.
- Instances are frozen; aggregation never mutates its input.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FlightState:
    """
    State vector of a single aircraft.

    Fields mirror the OpenSky state vector, narrowed to what the
    dashboard consumes.
    """
    icao24: str
    callsign: str
    country: str
    last_contact: int  # epoch seconds, recency key

    lon: Optional[float]
    lat: Optional[float]
    baro_altitude: Optional[float]
    on_ground: bool
    velocity_ms: Optional[float]
    heading: Optional[float]
    geo_altitude: Optional[float]
    squawk: Optional[str]

    def has_position(self) -> bool:
        """Check if this state has both latitude and longitude."""
        return self.lat is not None and self.lon is not None

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'icao24': self.icao24,
            'callsign': self.callsign,
            'country': self.country,
            'last_contact': self.last_contact,
            'lon': self.lon,
            'lat': self.lat,
            'baro_altitude': self.baro_altitude,
            'on_ground': self.on_ground,
            'velocity_ms': self.velocity_ms,
            'heading': self.heading,
            'geo_altitude': self.geo_altitude,
            'squawk': self.squawk,
        }
