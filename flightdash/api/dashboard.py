"""
Dashboard API endpoints.

Provides endpoints for:
- GET /api/dashboard - Aggregated metrics for the latest snapshot
- GET /api/dashboard/current - Flight under the presentation cursor
- GET /api/dashboard/status - Poller status and effective configuration
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, jsonify, request, current_app

from flightdash.config import config

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/api/dashboard')


@dashboard_bp.route('', methods=['GET'])
def get_dashboard():
    """
    Get every dashboard metric for the latest snapshot.

    Returns:
    - KPIs (active / on ground / total)
    - Airline ranking and group performance tables
    - Recent airborne flights and the current flight
    - Traffic series
    - Status of the last snapshot attempt (loading, error)
    """
    start_time = time.perf_counter()

    cache = current_app.config['DASHBOARD_CACHE']
    result = cache.view.to_dict()
    result.update({
        'time': cache.timestamp,
        'loading': cache.loading,
        'error': cache.error,
        'status': cache.status,
    })

    query_time_ms = (time.perf_counter() - start_time) * 1000
    result['query_time_ms'] = round(query_time_ms, 2)

    return jsonify(result)


@dashboard_bp.route('/current', methods=['GET'])
def get_current_flight():
    """
    Get the flight under the presentation cursor.

    Query parameters:
    - step: int, move the cursor by this many positions before
            reading (negative moves back, default 0)

    The cursor wraps around the recent airborne list. When that list is
    empty, the snapshot's current flight is returned instead.
    """
    try:
        step = int(request.args.get('step', 0))
    except ValueError:
        return jsonify({'error': 'step must be an integer'}), 400

    cache = current_app.config['DASHBOARD_CACHE']
    flight, index, total = cache.select(step)

    if flight is None:
        return jsonify({
            'flight': None,
            'message': 'No airborne flights',
            'total_count': 0,
        })

    return jsonify({
        'flight': flight.to_dict(),
        'current_index': index,
        'total_count': total,
    })


@dashboard_bp.route('/status', methods=['GET'])
def get_status():
    """
    Get system status information.

    Returns:
    - Poller statistics (binning mode, pause deadline)
    - Cache statistics
    - Aggregation configuration
    """
    cache = current_app.config['DASHBOARD_CACHE']
    poller = current_app.config['SNAPSHOT_POLLER']
    aggregator = poller.aggregator

    return jsonify({
        'status': cache.status,
        'error': cache.error,
        'polling': poller.stats,
        'cache': cache.stats,
        'config': {
            'poll_interval_seconds': poller.interval_seconds,
            'region_filter': config.polling.region_filter,
            'on_time_policy': aggregator.on_time_policy.value,
            'group_by': aggregator.group_by.value,
            'current_flight_strategy': aggregator.current_flight_strategy.value,
        },
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })
