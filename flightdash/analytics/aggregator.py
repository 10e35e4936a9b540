"""
Snapshot aggregation for the dashboard.

Five independent derivations over one batch of FlightState records:

1. Active count: airborne vs on-ground partition
2. Airline ranking: share of traffic per callsign prefix
3. Group performance: on-time vs delayed proxy per group
4. Recent airborne: latest positioned airborne observations
5. Traffic bins: airborne counts over fixed-size row slices

Every function is pure and total: empty input gives an empty or zero
result, never an exception. Configurable choices (on-time rule, group
key, current-flight selection) are explicit enums rather than toggles
buried in the code.
"""

import logging
import math
import re
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from flightdash.config import config
from flightdash.models import (
    AggregateView,
    AirlineShare,
    FlightState,
    GroupPerformance,
    TrafficPoint,
)

logger = logging.getLogger(__name__)

UNKNOWN_PREFIX = 'UNK'
UNKNOWN_COUNTRY = 'Unknown'

# On-time thresholds
STATIONARY_VELOCITY_MS = 1.0
GROUND_ALTITUDE_M = 20.0

_DIGIT_TAIL = re.compile(r'[0-9].*$', re.DOTALL)


class OnTimePolicy(str, Enum):
    """
    Rule deciding whether an observation counts as on time.

    - GROUND_LOW_ALTITUDE: on ground AND geo altitude < 20m
    - GROUND_OR_STATIONARY: on ground OR (velocity < 1 m/s AND geo altitude < 20m)

    Missing velocity or altitude is treated as 0 by both rules.
    """
    GROUND_LOW_ALTITUDE = 'ground_low_altitude'
    GROUND_OR_STATIONARY = 'ground_or_stationary'


class GroupKey(str, Enum):
    """What the performance table is grouped by."""
    CALLSIGN_PREFIX = 'callsign_prefix'
    COUNTRY = 'country'


class CurrentFlightStrategy(str, Enum):
    """
    How the single "current flight" is picked.

    - MOST_RECENT_POSITIONED: head of the recent-airborne list, falling
      back to the latest-contact airborne record when nothing airborne
      has a position
    - LATEST_CONTACT: airborne record with the greatest last_contact,
      position not required
    """
    MOST_RECENT_POSITIONED = 'most_recent_positioned'
    LATEST_CONTACT = 'latest_contact'


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def callsign_prefix(callsign: Optional[str]) -> str:
    """
    Airline proxy key for a callsign.

    Drops everything from the first digit onward and keeps at most
    three characters: 'UAL123' -> 'UAL', 'N12345' -> 'N'. Empty
    results map to 'UNK'.
    """
    prefix = _DIGIT_TAIL.sub('', (callsign or '').strip())[:3]
    return prefix or UNKNOWN_PREFIX


def active_count(flights: Iterable[FlightState]) -> int:
    """Count of records not on the ground."""
    return sum(1 for f in flights if not f.on_ground)


def airline_ranking(flights: Sequence[FlightState], limit: int = 8) -> List[AirlineShare]:
    """
    Rank callsign prefixes by number of observations.

    Ties keep first-seen order. percent_of_all is relative to every
    record; percent_of_top only to the records of the returned prefixes.
    """
    counts: Dict[str, int] = {}
    for f in flights:
        key = callsign_prefix(f.callsign)
        counts[key] = counts.get(key, 0) + 1

    total = sum(counts.values()) or 1
    top = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:limit]
    sum_top = sum(n for _, n in top) or 1

    return [
        AirlineShare(
            name=name,
            count=n,
            percent_of_all=round_half_up(100 * n / total),
            percent_of_top=round_half_up(100 * n / sum_top),
        )
        for name, n in top
    ]


def is_on_time(flight: FlightState, policy: OnTimePolicy) -> bool:
    """Apply an on-time rule to one observation."""
    altitude = flight.geo_altitude if flight.geo_altitude is not None else 0.0
    low = altitude < GROUND_ALTITUDE_M

    if policy == OnTimePolicy.GROUND_LOW_ALTITUDE:
        return flight.on_ground and low

    velocity = flight.velocity_ms if flight.velocity_ms is not None else 0.0
    return flight.on_ground or (velocity < STATIONARY_VELOCITY_MS and low)


def group_key(flight: FlightState, group_by: GroupKey) -> str:
    if group_by == GroupKey.COUNTRY:
        return flight.country or UNKNOWN_COUNTRY
    return callsign_prefix(flight.callsign)


def group_performance(
    flights: Sequence[FlightState],
    policy: OnTimePolicy = OnTimePolicy.GROUND_OR_STATIONARY,
    group_by: GroupKey = GroupKey.CALLSIGN_PREFIX,
    limit: int = 10,
) -> List[GroupPerformance]:
    """
    On-time vs delayed counts per group, first-seen order.

    Only the first `limit` groups are returned; groups are not sorted.
    """
    tally: Dict[str, List[int]] = {}
    for f in flights:
        acc = tally.setdefault(group_key(f, group_by), [0, 0])
        if is_on_time(f, policy):
            acc[0] += 1
        else:
            acc[1] += 1

    return [
        GroupPerformance(key=key, on_time_count=on_time, delayed_count=delayed)
        for key, (on_time, delayed) in list(tally.items())[:limit]
    ]


def recent_airborne(flights: Sequence[FlightState], limit: int = 7) -> List[FlightState]:
    """Most recent airborne records that carry a position, newest first."""
    positioned = [f for f in flights if not f.on_ground and f.has_position()]
    positioned.sort(key=lambda f: f.last_contact, reverse=True)
    return positioned[:limit]


def latest_airborne(flights: Sequence[FlightState]) -> Optional[FlightState]:
    """Airborne record with the greatest last_contact; first wins ties."""
    airborne = [f for f in flights if not f.on_ground]
    if not airborne:
        return None
    return max(airborne, key=lambda f: f.last_contact)


def current_flight(
    flights: Sequence[FlightState],
    strategy: CurrentFlightStrategy = CurrentFlightStrategy.MOST_RECENT_POSITIONED,
    recent: Optional[List[FlightState]] = None,
) -> Optional[FlightState]:
    """
    Pick the single flight to feature.

    `recent` may be passed to reuse an already computed recent_airborne list.
    """
    if strategy == CurrentFlightStrategy.LATEST_CONTACT:
        return latest_airborne(flights)

    if recent is None:
        recent = recent_airborne(flights, limit=1)
    if recent:
        return recent[0]
    return latest_airborne(flights)


def row_traffic_bins(flights: Sequence[FlightState], bins: int = 60) -> List[TrafficPoint]:
    """
    Airborne counts over equal slices of the input order.

    Slices are ceil(n / bins) records wide (the last may be shorter)
    and labelled '{end}/{n}'. Labels reflect row position, not time.
    """
    n = len(flights)
    if n == 0 or bins <= 0:
        return []

    step = math.ceil(n / bins)
    airborne = np.fromiter((not f.on_ground for f in flights), dtype=np.int64, count=n)
    starts = np.arange(0, n, step)
    counts = np.add.reduceat(airborne, starts)

    return [
        TrafficPoint(label=f'{min(int(start) + step, n)}/{n}', airborne_count=int(count))
        for start, count in zip(starts, counts)
    ]


class Aggregator:
    """
    Computes an AggregateView from one snapshot.

    Holds only configuration; compute() is pure and safe to call on
    every batch without coordination.
    """

    def __init__(
        self,
        on_time_policy: OnTimePolicy = OnTimePolicy.GROUND_OR_STATIONARY,
        group_by: GroupKey = GroupKey.CALLSIGN_PREFIX,
        current_flight_strategy: CurrentFlightStrategy = CurrentFlightStrategy.MOST_RECENT_POSITIONED,
        ranking_size: int = 8,
        performance_groups: int = 10,
        recent_size: int = 7,
        traffic_bins: int = 60,
    ):
        self.on_time_policy = OnTimePolicy(on_time_policy)
        self.group_by = GroupKey(group_by)
        self.current_flight_strategy = CurrentFlightStrategy(current_flight_strategy)
        self.ranking_size = ranking_size
        self.performance_groups = performance_groups
        self.recent_size = recent_size
        self.traffic_bins = traffic_bins

    @classmethod
    def from_config(cls) -> 'Aggregator':
        """Create aggregator from application configuration."""
        agg = config.aggregation
        return cls(
            on_time_policy=OnTimePolicy(agg.on_time_policy),
            group_by=GroupKey(agg.group_by),
            current_flight_strategy=CurrentFlightStrategy(agg.current_flight_strategy),
            ranking_size=agg.ranking_size,
            performance_groups=agg.performance_groups,
            recent_size=agg.recent_size,
            traffic_bins=agg.traffic_bins,
        )

    def compute(
        self,
        flights: Sequence[FlightState],
        traffic: Optional[List[TrafficPoint]] = None,
    ) -> AggregateView:
        """
        Derive every dashboard metric from one batch.

        Args:
            flights: Records of the current snapshot
            traffic: Pre-built traffic series (wall-clock mode). When
                     None, row-position bins are computed from `flights`.
        """
        active = active_count(flights)
        recent = recent_airborne(flights, limit=self.recent_size)

        if traffic is None:
            traffic = row_traffic_bins(flights, bins=self.traffic_bins)

        view = AggregateView(
            active_count=active,
            on_ground_count=len(flights) - active,
            total_count=len(flights),
            airline_ranking=airline_ranking(flights, limit=self.ranking_size),
            airport_performance=group_performance(
                flights,
                policy=self.on_time_policy,
                group_by=self.group_by,
                limit=self.performance_groups,
            ),
            recent_airborne=recent,
            current_flight=current_flight(flights, self.current_flight_strategy, recent=recent),
            traffic_series=list(traffic),
        )

        logger.debug(f'Aggregated {len(flights)} records ({active} airborne)')
        return view
