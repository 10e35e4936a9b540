"""
Derived dashboard views.

Everything here is a pure function of one snapshot's FlightState
collection. Views are never persisted and own no state; a new
AggregateView replaces the previous one on every batch.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from flightdash.models.flight_state import FlightState


@dataclass(frozen=True)
class AirlineShare:
    """Share of traffic for one callsign prefix."""
    name: str
    count: int
    percent_of_all: int
    percent_of_top: int

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'count': self.count,
            'percent_of_all': self.percent_of_all,
            'percent_of_top': self.percent_of_top,
        }


@dataclass(frozen=True)
class GroupPerformance:
    """On-time vs delayed proxy counts for one group."""
    key: str
    on_time_count: int
    delayed_count: int

    @property
    def total(self) -> int:
        return self.on_time_count + self.delayed_count

    def to_dict(self) -> dict:
        return {
            'key': self.key,
            'on_time_count': self.on_time_count,
            'delayed_count': self.delayed_count,
        }


@dataclass(frozen=True)
class TrafficPoint:
    """
    One point of the traffic chart.

    The label is either a row position ('120/6000') or a wall-clock
    time of day ('14:05'), depending on the binning mode.
    """
    label: str
    airborne_count: int

    def to_dict(self) -> dict:
        return {'label': self.label, 'airborne_count': self.airborne_count}


@dataclass(frozen=True)
class AggregateView:
    """Complete set of dashboard metrics for one snapshot."""
    active_count: int = 0
    on_ground_count: int = 0
    total_count: int = 0

    airline_ranking: List[AirlineShare] = field(default_factory=list)
    airport_performance: List[GroupPerformance] = field(default_factory=list)
    recent_airborne: List[FlightState] = field(default_factory=list)
    current_flight: Optional[FlightState] = None
    traffic_series: List[TrafficPoint] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'kpis': {
                'active': self.active_count,
                'on_ground': self.on_ground_count,
                'total': self.total_count,
            },
            'airline_ranking': [a.to_dict() for a in self.airline_ranking],
            'airport_performance': [g.to_dict() for g in self.airport_performance],
            'recent_airborne': [f.to_dict() for f in self.recent_airborne],
            'current_flight': self.current_flight.to_dict() if self.current_flight else None,
            'traffic_series': [p.to_dict() for p in self.traffic_series],
        }
