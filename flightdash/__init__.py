"""
FlightDash Backend Package.

Flight-data dashboard backend built with Flask and NumPy.

Modules:
    api/         REST endpoints for snapshots, dashboard metrics and status
    models/      Frozen dataclasses (FlightState, AggregateView)
    ingestion/   CSV parsing, OpenSky client, snapshot providers and poller
    analytics/   Snapshot aggregation and traffic series
    cache.py     Thread-safe holder of the latest dashboard view
    config.py    Centralized configuration from environment variables
"""

__version__ = '1.0.0'
