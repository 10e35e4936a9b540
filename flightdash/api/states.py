"""
Raw snapshot endpoint.

- GET /api/states - Current snapshot

A live source is never contacted from a request handler: its last
published snapshot is served from the dashboard cache, so the poller
stays the only caller and its rate-limit cooldown holds. A file source
is read on demand.

Always answers 200: provider failures come back as an empty flight
list with an 'error' field.
"""

import logging

from flask import Blueprint, jsonify, current_app

from flightdash.analytics.traffic import BinningMode

logger = logging.getLogger(__name__)

states_bp = Blueprint('states', __name__, url_prefix='/api/states')


@states_bp.route('', methods=['GET'])
def get_states():
    """
    Return the current snapshot.

    Response: {"time": int, "flights": [...], "error"?: str}
    """
    provider = current_app.config['SNAPSHOT_PROVIDER']

    if provider.binning_mode == BinningMode.SAMPLES:
        cache = current_app.config['DASHBOARD_CACHE']
        result = {
            'time': cache.timestamp,
            'flights': [f.to_dict() for f in cache.flights],
        }
        if cache.error:
            result['error'] = cache.error
        return jsonify(result)

    snapshot = provider.fetch()
    return jsonify(snapshot.to_dict())
