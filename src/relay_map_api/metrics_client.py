"""VictoriaMetrics queries for the relay status time series."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import aiohttp

from .config_manager import RelayMapSettings
from .exceptions import UpstreamUnavailableError
from .upstream import UpstreamClient

TOTAL_RELAYS_METRIC = "total_relays"
TOTAL_OBSERVED_BANDWIDTH_METRIC = "total_observed_bandwidth"
AVERAGE_BANDWIDTH_RATE_METRIC = "average_bandwidth_rate"

_UNKNOWN_STATUS = "unknown"


def build_query(metric: str, settings: RelayMapSettings) -> str:
    """Scope ``metric`` to the configured Onionoo scrape target."""
    return (
        f'{metric}{{cluster="{settings.cluster}", env="{settings.env}", '
        f'instance="{settings.onionoo_instance}", job="{settings.job}"}}'
    )


def _series(payload: Any) -> List[Dict[str, Any]]:
    try:
        result = payload["data"]["result"]
    except (KeyError, TypeError) as error:
        raise UpstreamUnavailableError("Malformed VictoriaMetrics response") from error
    if not isinstance(result, list):
        raise UpstreamUnavailableError("Malformed VictoriaMetrics response")
    return result


def _by_status(payload: Any, pick: Callable[[Dict[str, Any]], Any]) -> Dict[str, Any]:
    mapped: Dict[str, Any] = {}
    for item in _series(payload):
        try:
            status = (item.get("metric") or {}).get("status", _UNKNOWN_STATUS)
            mapped[status] = pick(item)
        except (AttributeError, IndexError, KeyError, TypeError) as error:
            raise UpstreamUnavailableError("Malformed VictoriaMetrics series") from error
    return mapped


def latest_by_status(payload: Any) -> Dict[str, Any]:
    """Map each series' status label to its instant value."""
    return _by_status(payload, lambda item: item["value"][1])


def values_by_status(payload: Any) -> Dict[str, Any]:
    """Map each series' status label to its list of ``[timestamp, value]`` points."""
    return _by_status(payload, lambda item: item["values"])


class VictoriaMetricsClient(UpstreamClient):
    def __init__(self, settings: RelayMapSettings, client: Optional[aiohttp.ClientSession] = None) -> None:
        super().__init__(settings, client, logger_name="metrics")
        self._base_url = settings.victoria_metrics_url

    async def query(self, query: str) -> Any:
        return await self._fetch_json(f"{self._base_url}/api/v1/query", {"query": query})

    async def query_range(self, query: str, start: str, end: str, step: str) -> Any:
        params = {"query": query, "start": start, "end": end, "step": step}
        return await self._fetch_json(f"{self._base_url}/api/v1/query_range", params)
