"""Tests de la API HTTP de sensores (ingesta, latest, histórico, actuadores).

Ejecutar:
    pytest tests/test_api_endpoints.py -v
"""

from unittest.mock import MagicMock

from sensor_api.control import ControlFlag, ControlStateStore
from sensor_api.dependencies import get_control_store, get_ingestion_gate
from sensor_api.errors import StorageUnavailable
from sensor_api.main import app


class _BrokenStore(ControlStateStore):
    backend_name = "broken"

    def get_flag(self, name: str) -> ControlFlag:
        raise StorageUnavailable(f"get_flag({name})")

    def set_flag(self, name: str, value: bool) -> ControlFlag:
        raise StorageUnavailable(f"set_flag({name})")


# =============================================================================
# TESTS: INGESTA
# =============================================================================

class TestIngest:
    """POST /api/readings"""

    def test_json_ingest(self, client):
        resp = client.post("/api/readings", json={"temperature": 24.5, "relay_on": True})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["id"] >= 1
        assert body["timestamp"].startswith("2026-01-15T12:00:00")

    def test_form_ingest(self, client):
        resp = client.post("/api/readings", data={"humidity": "55.5", "led_on": "1"})
        assert resp.status_code == 200

        latest = client.get("/api/readings/latest").json()
        assert latest["data"]["humidity"] == 55.5
        assert latest["data"]["led_on"] is True

    def test_empty_payload_is_400(self, client):
        resp = client.post("/api/readings", content=b"")
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "error": "No data received"}

    def test_malformed_field_stored_as_null(self, client):
        resp = client.post("/api/readings", json={"temperature": "broken", "co2_ppm": 812})
        assert resp.status_code == 200
        data = client.get("/api/readings/latest").json()["data"]
        assert data["temperature"] is None
        assert data["co2_ppm"] == 812.0

    def test_out_of_range_int_stored_as_null(self, client):
        resp = client.post("/api/readings", json={"temperature": 24.5, "soil_raw": 1e30})
        assert resp.status_code == 200
        data = client.get("/api/readings/latest").json()["data"]
        assert data["temperature"] == 24.5
        assert data["soil_raw"] is None

    def test_huge_json_integer_stored_as_null(self, client):
        resp = client.post("/api/readings", content=b'{"mq135_raw": ' + b"9" * 400 + b', "humidity": 40}')
        assert resp.status_code == 200
        data = client.get("/api/readings/latest").json()["data"]
        assert data["mq135_raw"] is None
        assert data["humidity"] == 40.0

    def test_method_not_allowed(self, client):
        resp = client.get("/api/readings")
        assert resp.status_code == 405
        assert resp.json()["success"] is False

    def test_storage_failure_is_500(self, client):
        failing = MagicMock()
        failing.ingest.side_effect = StorageUnavailable("append")
        app.dependency_overrides[get_ingestion_gate] = lambda: failing

        resp = client.post("/api/readings", json={"temperature": 20})
        assert resp.status_code == 500
        assert resp.json()["success"] is False


# =============================================================================
# TESTS: LATEST + LIVENESS
# =============================================================================

class TestLatest:
    """GET /api/readings/latest"""

    def test_no_data_is_success_with_null(self, client):
        resp = client.get("/api/readings/latest")
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["data"] is None

    def test_end_to_end_fresh_then_stale(self, client, clock):
        client.post("/api/readings", json={"temperature": 24.5, "relay_on": True})

        clock.advance(5)
        body = client.get("/api/readings/latest").json()
        assert body["success"] is True
        assert body["data"]["temperature"] == 24.5
        assert body["data"]["relay_on"] is True

        clock.advance(6)
        resp = client.get("/api/readings/latest")
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is False
        assert body["data"] is None
        assert body["age_seconds"] >= 11
        assert body["last_update"].startswith("2026-01-15T12:00:00")

    def test_exactly_at_threshold_is_fresh(self, client, clock):
        client.post("/api/readings", json={"temperature": 20})
        clock.advance(10)
        assert client.get("/api/readings/latest").json()["success"] is True

    def test_new_reading_recovers(self, client, clock):
        client.post("/api/readings", json={"temperature": 20})
        clock.advance(30)
        assert client.get("/api/readings/latest").json()["success"] is False
        client.post("/api/readings", json={"temperature": 21})
        assert client.get("/api/readings/latest").json()["data"]["temperature"] == 21.0


# =============================================================================
# TESTS: HISTÓRICO
# =============================================================================

class TestHistory:
    """GET /api/readings/history"""

    def test_ascending_order(self, client, clock):
        for value in (1, 2, 3):
            client.post("/api/readings", json={"temperature": value})
            clock.advance(60)

        body = client.get("/api/readings/history").json()
        assert body["success"] is True
        assert body["count"] == 3
        assert [r["temperature"] for r in body["data"]] == [1.0, 2.0, 3.0]
        assert body["hours"] == 24
        assert body["limit"] == 500

    def test_limit_keeps_most_recent(self, client, clock):
        for value in range(5):
            client.post("/api/readings", json={"temperature": value})
            clock.advance(1)

        body = client.get("/api/readings/history", params={"limit": 2}).json()
        assert [r["temperature"] for r in body["data"]] == [3.0, 4.0]

    def test_window_excludes_old(self, client, clock):
        client.post("/api/readings", json={"temperature": 1})
        clock.advance(2 * 3600)
        client.post("/api/readings", json={"temperature": 2})

        body = client.get("/api/readings/history", params={"hours": 1}).json()
        assert [r["temperature"] for r in body["data"]] == [2.0]

    def test_parameter_normalization(self, client):
        cases = [
            ({"limit": 0}, 24, 100),
            ({"limit": -5}, 24, 100),
            ({"limit": 5000}, 24, 1000),
            ({"limit": "abc"}, 24, 100),
            ({"hours": 0}, 24, 500),
            ({"hours": -2}, 24, 500),
            ({"hours": 100000000}, 8760, 500),
            ({"hours": 6, "limit": 50}, 6, 50),
        ]
        for params, hours, limit in cases:
            body = client.get("/api/readings/history", params=params).json()
            assert (body["hours"], body["limit"]) == (hours, limit), params


# =============================================================================
# TESTS: ACTUADORES
# =============================================================================

class TestActuators:
    """/api/actuators/*"""

    def test_default_off(self, client):
        body = client.get("/api/actuators/relay").json()
        assert body["success"] is True
        assert body["relay_on"] is False

    def test_post_command_then_read(self, client):
        resp = client.post("/api/actuators/relay/control", json={"relay_on": True})
        assert resp.status_code == 200
        assert resp.json()["relay_on"] is True
        assert resp.json()["message"] == "Relay control command received"

        assert client.get("/api/actuators/relay").json()["relay_on"] is True
        assert client.get("/api/actuators/led").json()["led_on"] is False

    def test_get_command_with_query(self, client):
        resp = client.get("/api/actuators/led/control", params={"led_on": "1"})
        assert resp.status_code == 200
        assert client.get("/api/actuators").json() == {
            "success": True,
            "relay_on": False,
            "led_on": True,
        }

    def test_form_command(self, client):
        resp = client.post("/api/actuators/led/control", data={"led_on": "on"})
        assert resp.json()["led_on"] is True

    def test_missing_param_is_400(self, client):
        resp = client.post("/api/actuators/relay/control", json={})
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert "relay_on" in resp.json()["error"]

    def test_unknown_actuator_is_404(self, client):
        resp = client.get("/api/actuators/fan")
        assert resp.status_code == 404
        assert resp.json()["success"] is False

    def test_method_not_allowed(self, client):
        resp = client.delete("/api/actuators/relay/control")
        assert resp.status_code == 405

    def test_store_unavailable_is_500(self, client):
        app.dependency_overrides[get_control_store] = lambda: _BrokenStore()
        resp = client.post("/api/actuators/relay/control", json={"relay_on": True})
        assert resp.status_code == 500
        assert resp.json()["success"] is False

    def test_command_does_not_change_echo(self, client):
        client.post("/api/readings", json={"temperature": 20, "relay_on": False})
        client.post("/api/actuators/relay/control", json={"relay_on": True})
        # El echo solo cambia cuando el nodo reporta la próxima lectura
        assert client.get("/api/readings/latest").json()["data"]["relay_on"] is False


# =============================================================================
# TESTS: HEALTH + DIAGNÓSTICO
# =============================================================================

class TestOperational:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_ready(self, client):
        resp = client.get("/ready")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ready"

    def test_diagnostics(self, client):
        client.post("/api/readings", json={"temperature": 20})
        body = client.get("/api/diagnostics").json()
        assert body["success"] is True
        assert body["readings_table_exists"] is True
        assert body["readings_count"] == 1
        assert body["control_store_backend"] == "db"
        assert body["schema_version"] == 1
