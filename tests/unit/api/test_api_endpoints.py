import pytest
from elastic_transport import ConnectionError as TransportConnectionError
from fastapi.testclient import TestClient
from helpers.fakes import FakeElasticsearch
from metricstream import main


@pytest.fixture
def fake_backend():
    return FakeElasticsearch()


@pytest.fixture
def client(monkeypatch, fake_backend):
    monkeypatch.setattr(main, "create_client", lambda settings: fake_backend)
    with TestClient(main.app) as c:
        yield c
    assert fake_backend.closed


def test_app_configuration():
    assert main.app.title == "Metricbeat Stream"
    assert main.app.url_path_for("current_snapshot") == "/metricbeat"
    assert main.app.url_path_for("current_view") == "/metricbeat/view"
    assert main.app.url_path_for("stream") == "/ws"
    assert main.app.url_path_for("healthz") == "/healthz"
    assert main.app.url_path_for("readyz") == "/readyz"


def test_pull_snapshot_record(client, fake_backend):
    resp = client.get("/metricbeat")
    assert resp.status_code == 200
    body = resp.json()
    assert body["cpuUserPct"] == pytest.approx(0.2)
    assert body["load5m"] == pytest.approx(1.25)
    assert body["processCount"] == 312
    assert body["memoryUsedBytes"] == 1073741824
    assert body["topDiskMount"] == ["/data", 45.67]
    assert len(body) == 14
    assert len(fake_backend.calls) == 1


def test_pull_view_payload(client):
    resp = client.get("/metricbeat/view")
    assert resp.status_code == 200
    body = resp.json()
    assert body["event"] == "MetricbeatData"
    assert body["data"][:5] == ["7.500", "51.230", "1.250", "1.000", "25.000"]
    assert body["data"][8] == "1.0"


def test_pull_backend_failure_is_503(client, fake_backend):
    fake_backend.error = TransportConnectionError("connection refused")
    resp = client.get("/metricbeat")
    assert resp.status_code == 503
    assert "metricbeat" in resp.json()["detail"]


def test_readyz_after_first_snapshot(client):
    assert client.get("/readyz").status_code == 503
    client.get("/metricbeat")
    resp = client.get("/readyz")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ready"


def test_healthz(client, fake_backend):
    assert client.get("/healthz").status_code == 200
    fake_backend.alive = False
    assert client.get("/healthz").status_code == 503


def test_websocket_receives_immediate_delivery(client):
    with client.websocket_connect("/ws") as ws:
        message = ws.receive_json()
    assert message["event"] == "MetricbeatData"
    assert message["data"][0] == "7.500"
    assert message["data"][5] == 312
    assert message["data"][10] == ["/data", "45.67"]
    assert main.app.state.snapshot_service.subscriptions.active_count == 0


def test_prometheus_endpoint(client):
    client.get("/metricbeat")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "metricstream_backend_queries_total" in resp.text


def test_websocket_ignores_binary_and_text_frames(monkeypatch, fake_backend):
    monkeypatch.setattr(main, "create_client", lambda settings: fake_backend)
    monkeypatch.setattr(main.settings, "stream_tick_interval_seconds", 0.05)
    with TestClient(main.app) as c:
        subscriptions = main.app.state.snapshot_service.subscriptions
        with c.websocket_connect("/ws") as ws:
            assert ws.receive_json()["event"] == "MetricbeatData"
            ws.send_bytes(b"\x00")
            ws.send_text("ping")
            assert ws.receive_json()["event"] == "MetricbeatData"
            assert subscriptions.active_count == 1
        assert subscriptions.active_count == 0


def test_cors_allows_cross_origin_dashboards(client):
    preflight = client.options(
        "/metricbeat",
        headers={
            "Origin": "http://dashboard.example",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert preflight.status_code == 200
    assert preflight.headers["access-control-allow-origin"] == "*"

    resp = client.get("/metricbeat/view", headers={"Origin": "http://dashboard.example"})
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"
