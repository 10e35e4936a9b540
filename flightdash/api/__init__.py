"""
API module for FlightDash.

Provides REST endpoints for:
- Raw snapshot data
- Aggregated dashboard metrics
- System status
"""

from flightdash.api.states import states_bp
from flightdash.api.dashboard import dashboard_bp

__all__ = ['states_bp', 'dashboard_bp']
