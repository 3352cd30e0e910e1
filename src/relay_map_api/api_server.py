"""
Flask application exposing the relay map, relay lookup, metrics and
hardware registration endpoints.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from flask import Flask, jsonify, request

from .config_manager import RelayMapSettings
from .exceptions import RelayNotFoundError
from .hardware_validation import validate_hardware_relay
from .hex_indexer import HexIndexer
from .logging_utils import get_logger
from .metrics_client import (
    AVERAGE_BANDWIDTH_RATE_METRIC,
    TOTAL_OBSERVED_BANDWIDTH_METRIC,
    TOTAL_RELAYS_METRIC,
    VictoriaMetricsClient,
    build_query,
    latest_by_status,
    values_by_status,
)
from .models import create_error_response
from .onionoo_client import OnionooClient
from .relay_map import CoordinateResolver, RelayMapAggregator

logger = get_logger("api")

# URL prefix -> metric name
METRIC_ROUTES: Dict[str, str] = {
    "total-relays": TOTAL_RELAYS_METRIC,
    "total-observed-bandwidth": TOTAL_OBSERVED_BANDWIDTH_METRIC,
    "average-bandwidth-rate": AVERAGE_BANDWIDTH_RATE_METRIC,
}


class RelayMapApi:
    def __init__(
        self,
        app: Flask,
        settings: RelayMapSettings,
        onionoo: OnionooClient,
        metrics: VictoriaMetricsClient,
        aggregator: RelayMapAggregator,
    ):
        self.app = app
        self.settings = settings
        self.onionoo = onionoo
        self.metrics = metrics
        self.aggregator = aggregator

        self._register_routes()

    def _register_routes(self):
        self.app.route('/health')(self.health_check)
        self.app.route('/relay-map/')(self.relay_map)
        self.app.route('/relays/<fingerprint>')(self.get_relay)
        self.app.route('/hardware/relays', methods=['POST'])(self.register_hardware_relay)
        for prefix, metric in METRIC_ROUTES.items():
            self.app.add_url_rule(
                f'/{prefix}', f'{prefix}-range', self._range_view(metric)
            )
            self.app.add_url_rule(
                f'/{prefix}-latest', f'{prefix}-latest', self._latest_view(metric)
            )

    def health_check(self):
        return jsonify({'status': 'ok'})

    async def relay_map(self):
        try:
            relays = await self.onionoo.details()
            hexes = self.aggregator.aggregate(relays)
        except Exception:
            logger.exception("Error building relay map")
            return jsonify(create_error_response('Error querying relay map')), 500
        return jsonify([hex_info.to_dict() for hex_info in hexes])

    async def get_relay(self, fingerprint):
        try:
            relay = await self.onionoo.find_relay(fingerprint)
        except RelayNotFoundError:
            logger.info("Relay %s not found", fingerprint)
            return jsonify(create_error_response('Relay not found')), 404
        except Exception:
            logger.exception("Error querying Onionoo for relay %s", fingerprint)
            return jsonify(create_error_response('Error querying Onionoo')), 500
        return jsonify(relay.to_summary())

    def register_hardware_relay(self):
        payload = request.get_json(silent=True)
        logger.debug("Hardware relay payload: %s", payload)
        relay, errors = validate_hardware_relay(payload)
        if errors:
            return jsonify({'errors': errors}), 400
        return jsonify(relay), 200

    def _range_view(self, metric: str) -> Callable:
        async def view():
            start = request.args.get('from', self.settings.range_from)
            end = request.args.get('to', self.settings.range_to)
            step = request.args.get('interval', self.settings.range_interval)
            try:
                payload = await self.metrics.query_range(
                    build_query(metric, self.settings), start, end, step
                )
                return jsonify(values_by_status(payload))
            except Exception:
                logger.exception("Error querying VictoriaMetrics range for %s", metric)
                return jsonify(create_error_response('Error querying VictoriaMetrics')), 500
        return view

    def _latest_view(self, metric: str) -> Callable:
        async def view():
            try:
                payload = await self.metrics.query(build_query(metric, self.settings))
                return jsonify(latest_by_status(payload))
            except Exception:
                logger.exception("Error querying VictoriaMetrics for %s", metric)
                return jsonify(create_error_response('Error querying VictoriaMetrics')), 500
        return view


def create_app(
    settings: RelayMapSettings,
    resolver: CoordinateResolver,
    onionoo: Optional[OnionooClient] = None,
    metrics: Optional[VictoriaMetricsClient] = None,
) -> Flask:
    """Build the Flask application with its collaborators wired in."""
    app = Flask(__name__)
    aggregator = RelayMapAggregator(resolver, HexIndexer(settings.hexagon_resolution))
    RelayMapApi(
        app,
        settings,
        onionoo or OnionooClient(settings),
        metrics or VictoriaMetricsClient(settings),
        aggregator,
    )
    return app
