"""
FlightDash Flask Application.

Main entry point for the web application. Initializes:
- Snapshot provider (CSV file or live OpenSky)
- Dashboard cache and snapshot poller
- API routes

Usage:
    python -m flightdash.app

Or with gunicorn:
    gunicorn "flightdash.app:create_app()"
"""

import logging
import os
from typing import Optional

from flask import Flask
from flask_cors import CORS

from flightdash.config import config
from flightdash.api import states_bp, dashboard_bp
from flightdash.analytics import Aggregator, BinningMode
from flightdash.cache import DashboardCache
from flightdash.ingestion import SnapshotPoller, provider_from_config

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def create_app(
    start_polling: bool = True,
    provider=None,
    aggregator: Optional[Aggregator] = None,
) -> Flask:
    """
    Application factory for Flask.

    Args:
        start_polling: Whether to load data at startup. A CSV source is
                       read once; a live source is polled in the
                       background. Set to False for testing.
        provider: Snapshot provider (selected from config if None)
        aggregator: Aggregator (created from config if None)

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = config.secret_key

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': '*'}})

    # Register API blueprints
    app.register_blueprint(states_bp)
    app.register_blueprint(dashboard_bp)

    provider = provider or provider_from_config()
    cache = DashboardCache()
    poller = SnapshotPoller(provider, cache, aggregator=aggregator)

    app.config['SNAPSHOT_PROVIDER'] = provider
    app.config['DASHBOARD_CACHE'] = cache
    app.config['SNAPSHOT_POLLER'] = poller

    if start_polling:
        if provider.binning_mode == BinningMode.SAMPLES:
            poller.start_background()
            logger.info(f'Live polling started (interval={poller.interval_seconds}s)')
        else:
            count = poller.poll_once()
            logger.info(f'Static snapshot loaded ({max(count, 0)} flight states)')

    # -------------------------------------------------------------------------
    # Routes
    # -------------------------------------------------------------------------

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'Not found'}, 404

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'error': 'Internal server error'}, 500

    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    # Get port from environment or default
    port = int(os.environ.get('PORT', 5000))

    logger.info(f'Starting FlightDash on http://localhost:{port}')
    logger.info(f'Dashboard API: http://localhost:{port}/api/dashboard')

    try:
        app.run(
            host='0.0.0.0',
            port=port,
            debug=config.debug,
            use_reloader=False,  # Disable reloader to prevent duplicate poller threads
        )
    finally:
        app.config['SNAPSHOT_POLLER'].stop()


if __name__ == '__main__':
    run_development_server()
