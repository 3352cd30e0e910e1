"""Tor relay map and metrics HTTP API."""

from .config_manager import RelayMapSettings
from .geo_resolver import GeoResolver
from .hex_indexer import HexIndexer
from .onionoo_client import OnionooClient
from .relay_map import RelayMapAggregator
from .metrics_client import VictoriaMetricsClient

__all__ = [
    "RelayMapSettings",
    "GeoResolver",
    "HexIndexer",
    "OnionooClient",
    "RelayMapAggregator",
    "VictoriaMetricsClient",
]
