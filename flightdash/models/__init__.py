"""
Data models for FlightDash.

Plain frozen dataclasses; nothing is persisted:
1. FlightState - one parsed aircraft observation
2. AggregateView and its parts - derived dashboard metrics
"""

from flightdash.models.flight_state import FlightState
from flightdash.models.aggregate import (
    AggregateView,
    AirlineShare,
    GroupPerformance,
    TrafficPoint,
)

__all__ = [
    'FlightState',
    'AggregateView',
    'AirlineShare',
    'GroupPerformance',
    'TrafficPoint',
]
