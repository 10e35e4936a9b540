"""
Analytics module for FlightDash.

Pure aggregation of flight-state snapshots into dashboard metrics,
plus the wall-clock traffic series used when polling live data.
NumPy backs the binning and smoothing.
"""

from flightdash.analytics.aggregator import (
    Aggregator,
    CurrentFlightStrategy,
    GroupKey,
    OnTimePolicy,
)
from flightdash.analytics.traffic import BinningMode, TrafficSeries

__all__ = [
    'Aggregator',
    'CurrentFlightStrategy',
    'GroupKey',
    'OnTimePolicy',
    'BinningMode',
    'TrafficSeries',
]
