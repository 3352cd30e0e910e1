from __future__ import annotations

import aiohttp
import h3
import pytest

from conftest import DummyClient, FakeResolver
from relay_map_api.api_server import create_app
from relay_map_api.metrics_client import VictoriaMetricsClient
from relay_map_api.onionoo_client import OnionooClient
from test_hardware_validation import VALID

DETAILS = {
    "relays": [
        {"fingerprint": "A", "running": True, "consensus_weight": 10, "or_addresses": ["1.2.3.4:9001"]},
        {"fingerprint": "B", "running": True, "consensus_weight": 20, "or_addresses": ["1.2.3.4:9001"]},
        {"fingerprint": "C", "running": False, "consensus_weight": 0, "or_addresses": []},
    ]
}

RANGE_PAYLOAD = {
    "data": {
        "result": [
            {"metric": {"status": "running"}, "values": [[1, "7000"], [2, "7001"]]},
            {"metric": {"status": "not-running"}, "values": [[1, "30"], [2, "31"]]},
        ]
    }
}


def make_client(settings, onionoo_payload=DETAILS, metrics_payload=RANGE_PAYLOAD):
    metrics_session = DummyClient(metrics_payload)
    app = create_app(
        settings,
        FakeResolver({"1.2.3.4": (40.0, -74.0)}),
        onionoo=OnionooClient(settings, client=DummyClient(onionoo_payload)),
        metrics=VictoriaMetricsClient(settings, client=metrics_session),
    )
    app.config["TESTING"] = True
    return app.test_client(), metrics_session


def test_health(settings):
    client, _ = make_client(settings)
    assert client.get("/health").get_json() == {"status": "ok"}


def test_relay_map(settings):
    client, _ = make_client(settings)
    response = client.get("/relay-map/")
    assert response.status_code == 200
    body = response.get_json()
    cell = h3.latlng_to_cell(40.0, -74.0, settings.hexagon_resolution)
    assert len(body) == 1
    assert body[0]["index"] == cell
    assert body[0]["relayCount"] == 2
    assert body[0]["geo"] == list(h3.cell_to_latlng(cell))
    assert len(body[0]["boundary"]) > 0


def test_relay_map_upstream_failure(settings):
    client, _ = make_client(settings, onionoo_payload=aiohttp.ClientConnectionError("down"))
    response = client.get("/relay-map/")
    assert response.status_code == 500
    assert response.get_json()["success"] is False


def test_relay_lookup(settings):
    client, _ = make_client(settings)
    response = client.get("/relays/B")
    assert response.status_code == 200
    assert response.get_json() == {"fingerprint": "B", "running": True, "consensus_weight": 20}


def test_relay_lookup_not_found(settings):
    client, _ = make_client(settings)
    response = client.get("/relays/XYZ")
    assert response.status_code == 404


def test_relay_lookup_upstream_failure(settings):
    client, _ = make_client(settings, onionoo_payload={"unexpected": True})
    assert client.get("/relays/A").status_code == 500


def test_range_metric_uses_defaults(settings):
    client, session = make_client(settings)
    response = client.get("/total-relays")
    assert response.status_code == 200
    assert response.get_json() == {
        "running": [[1, "7000"], [2, "7001"]],
        "not-running": [[1, "30"], [2, "31"]],
    }
    url, params = session.requests[0]
    assert url.endswith("/api/v1/query_range")
    assert params["query"].startswith("total_relays{")
    assert (params["start"], params["end"], params["step"]) == ("-7d", "now", "6h")


def test_range_metric_query_params(settings):
    client, session = make_client(settings)
    client.get("/average-bandwidth-rate?from=-1d&to=-1h&interval=30m")
    _, params = session.requests[0]
    assert params["query"].startswith("average_bandwidth_rate{")
    assert (params["start"], params["end"], params["step"]) == ("-1d", "-1h", "30m")


@pytest.mark.parametrize(
    "path,metric",
    [
        ("/total-relays-latest", "total_relays"),
        ("/total-observed-bandwidth-latest", "total_observed_bandwidth"),
        ("/average-bandwidth-rate-latest", "average_bandwidth_rate"),
    ],
)
def test_latest_metric(settings, path, metric):
    payload = {"data": {"result": [{"metric": {"status": "running"}, "value": [1, "42"]}]}}
    client, session = make_client(settings, metrics_payload=payload)
    response = client.get(path)
    assert response.get_json() == {"running": "42"}
    url, params = session.requests[0]
    assert url.endswith("/api/v1/query")
    assert params["query"].startswith(metric + "{")


def test_metric_upstream_failure(settings):
    client, _ = make_client(settings, metrics_payload={"data": None})
    assert client.get("/total-observed-bandwidth").status_code == 500


def test_hardware_relay_registration(settings):
    client, _ = make_client(settings)
    response = client.post("/hardware/relays", json=VALID)
    assert response.status_code == 200
    assert response.get_json() == VALID


def test_hardware_relay_validation_errors(settings):
    client, _ = make_client(settings)
    response = client.post("/hardware/relays", json={**VALID, "id": ""})
    assert response.status_code == 400
    assert response.get_json()["errors"][0]["msg"] == "id should not be empty"


class RaisingResolver:
    def resolve(self, ip):
        raise RuntimeError("reader exploded")


@pytest.mark.parametrize(
    "resolver",
    [FakeResolver({"1.2.3.4": (95.0, -74.0)}), RaisingResolver()],
    ids=["coordinate-out-of-range", "unexpected-error"],
)
def test_relay_map_pipeline_failure_is_json_500(settings, resolver):
    app = create_app(
        settings,
        resolver,
        onionoo=OnionooClient(settings, client=DummyClient(DETAILS)),
        metrics=VictoriaMetricsClient(settings, client=DummyClient(RANGE_PAYLOAD)),
    )
    response = app.test_client().get("/relay-map/")
    assert response.status_code == 500
    assert response.is_json
    assert response.get_json() == {"success": False, "message": "Error querying relay map"}


def test_hardware_relay_registration_echoes_body(settings):
    client, _ = make_client(settings)
    body = {**VALID, "id": 7, "note": "rack 4"}
    response = client.post("/hardware/relays", json=body)
    assert response.status_code == 200
    assert response.get_json() == body
