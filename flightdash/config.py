"""
Configuration management for FlightDash.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class SnapshotConfig:
    """Where the flight-state snapshot comes from."""
    source: str = os.getenv('SNAPSHOT_SOURCE', 'csv')  # 'csv' or 'opensky'
    csv_path: str = os.getenv('STATES_CSV_PATH', os.path.join('public', 'data', 'states.csv'))
    max_rows: int = int(os.getenv('STATES_MAX_ROWS', '50000'))

    @property
    def is_live(self) -> bool:
        return self.source == 'opensky'


@dataclass(frozen=True)
class OpenSkyConfig:
    """OpenSky API configuration."""
    username: Optional[str] = os.getenv('OPENSKY_USERNAME') or None
    password: Optional[str] = os.getenv('OPENSKY_PASSWORD') or None
    base_url: str = 'https://opensky-network.org/api'
    timeout_seconds: int = 30

    @property
    def is_authenticated(self) -> bool:
        return bool(self.username and self.password)


@dataclass(frozen=True)
class PollingConfig:
    """Snapshot polling settings."""
    interval_ms: int = int(os.getenv('POLL_INTERVAL_MS', '30000'))
    # Bounding box 'lamin,lomin,lamax,lomax'
    region_filter: Optional[str] = os.getenv('REGION_FILTER') or None
    rate_limit_cooldown_seconds: int = 60

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000.0


@dataclass(frozen=True)
class AggregationConfig:
    """Dashboard aggregation settings."""
    on_time_policy: str = os.getenv('ON_TIME_POLICY', 'ground_or_stationary')
    group_by: str = os.getenv('PERFORMANCE_GROUP_BY', 'callsign_prefix')
    current_flight_strategy: str = os.getenv('CURRENT_FLIGHT_STRATEGY', 'most_recent_positioned')

    ranking_size: int = 8
    performance_groups: int = 10
    recent_size: int = 7
    traffic_bins: int = 60

    # Live traffic series
    traffic_max_points: int = 60
    traffic_smoothing: int = int(os.getenv('TRAFFIC_SMOOTHING', '2'))


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    snapshot: SnapshotConfig
    opensky: OpenSkyConfig
    polling: PollingConfig
    aggregation: AggregationConfig

    # Flask settings
    secret_key: str
    debug: bool


def load_config() -> AppConfig:
    """Load all configuration."""
    return AppConfig(
        snapshot=SnapshotConfig(),
        opensky=OpenSkyConfig(),
        polling=PollingConfig(),
        aggregation=AggregationConfig(),
        secret_key=os.getenv('SECRET_KEY', 'dev-key-change-in-prod'),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
    )


# Singleton instance
config = load_config()
