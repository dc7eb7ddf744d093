"""Integration tests for the HTTP API."""

from fastapi.testclient import TestClient

from ledger import DeviceCommandBit, EventLedger
from utils.logger import logger


def post_event(client: TestClient, name="Alice", action="in", timestamp=1710000000):
    return client.post("/fingerprint-data", json={"name": name, "action": action, "timestamp": timestamp})


class TestFingerprintData:
    """Tests for POST /fingerprint-data."""

    def test_accepts_valid_event(self, client: TestClient) -> None:
        response = post_event(client)
        assert response.status_code == 200

        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Data received successfully"
        assert data["entry"]["name"] == "Alice"
        assert data["entry"]["action"] == "in"
        assert data["entry"]["timestamp"] == 1710000000000
        assert isinstance(data["entry"]["receivedAt"], int)

    def test_accepts_iso_timestamp(self, client: TestClient) -> None:
        response = post_event(client, timestamp="2024-03-09T16:00:00Z")
        assert response.json()["entry"]["timestamp"] == 1710000000000

    def test_missing_timestamp_is_accepted(self, client: TestClient) -> None:
        response = client.post("/fingerprint-data", json={"name": "Alice", "action": "out"})
        assert response.status_code == 200
        assert response.json()["entry"]["timestamp"] > 0

    def test_empty_name_is_rejected(self, client: TestClient, ledger: EventLedger) -> None:
        response = post_event(client, name="", timestamp=123)

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "name" in response.json()["error"]
        assert len(ledger) == 0

    def test_unknown_action_is_rejected(self, client: TestClient, ledger: EventLedger) -> None:
        response = post_event(client, name="Bob", action="left", timestamp=123)

        assert response.status_code == 400
        assert "action" in response.json()["error"].lower()
        assert len(ledger) == 0

    def test_wrong_field_type_is_rejected(self, client: TestClient) -> None:
        response = client.post("/fingerprint-data", json={"name": 7, "action": "in"})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_missing_body_is_rejected(self, client: TestClient) -> None:
        response = client.post("/fingerprint-data")
        assert response.status_code == 400

    def test_duplicate_is_accepted_but_not_stored(self, client: TestClient, ledger: EventLedger) -> None:
        first = post_event(client)
        second = post_event(client)

        assert second.status_code == 200
        assert second.json()["success"] is True
        assert second.json()["entry"] == first.json()["entry"]
        assert len(ledger) == 1


class TestReadEndpoints:
    """Tests for the dashboard read endpoints."""

    def test_get_all_data(self, client: TestClient) -> None:
        post_event(client, name="Alice")
        post_event(client, name="Bob")

        data = client.get("/api/data").json()

        assert data["success"] is True
        assert data["count"] == 2
        assert [e["name"] for e in data["data"]] == ["Bob", "Alice"]

    def test_latest_when_empty(self, client: TestClient) -> None:
        response = client.get("/api/data/latest")
        assert response.status_code == 200
        assert response.json() == {"success": True, "data": None}

    def test_latest(self, client: TestClient) -> None:
        post_event(client, name="Alice")
        post_event(client, name="Bob", action="out")

        assert client.get("/api/data/latest").json()["data"]["name"] == "Bob"

    def test_stats(self, client: TestClient) -> None:
        post_event(client, name="Alice", timestamp=None)
        post_event(client, name="Bob", action="out", timestamp=None)

        stats = client.get("/api/stats").json()["stats"]

        assert stats["totalEntries"] == 2
        assert stats["signInsToday"] == 1
        assert stats["signOutsToday"] == 1
        assert stats["entriesLast24h"] == 2

    def test_sessions(self, client: TestClient) -> None:
        post_event(client, name="Alice", timestamp=1710000000)
        post_event(client, name="Bob", timestamp=1710000100)
        post_event(client, name="Alice", action="out", timestamp=1710003600)

        data = client.get("/api/sessions").json()

        assert data["count"] == 1
        assert data["sessions"] == [{"name": "Bob", "startTime": 1710000100000}]


class TestClear:
    """Tests for DELETE /api/data."""

    def test_clear(self, client: TestClient, ledger: EventLedger) -> None:
        post_event(client, name="Alice")
        post_event(client, name="Bob")

        data = client.delete("/api/data").json()

        assert data["success"] is True
        assert data["removed"] == 2
        assert data["message"] == "Cleared 2 entries"
        assert client.get("/api/data").json()["count"] == 0
        assert ledger.active_sessions() == {}


class TestHealth:
    """Tests for GET /health."""

    def test_health(self, client: TestClient) -> None:
        post_event(client)

        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["entriesStored"] == 1
        assert data["uptime"] >= 0
        assert "timestamp" in data


class TestPiStatus:
    """Tests for the device command bit endpoints."""

    def test_default_is_zero(self, client: TestClient) -> None:
        assert client.get("/pi-status").json() == {"status": 0}

    def test_set_and_read(self, client: TestClient, command_bit: DeviceCommandBit) -> None:
        response = client.post("/pi-status", json={"status": 1})

        assert response.json() == {"ok": True, "status": 1}
        assert client.get("/pi-status").json() == {"status": 1}
        assert command_bit.get() == 1

    def test_rejects_other_values(self, client: TestClient) -> None:
        for value in (2, -1, "1", True, None):
            response = client.post("/pi-status", json={"status": value})
            assert response.status_code == 400
            assert response.json()["ok"] is False

        assert client.get("/pi-status").json() == {"status": 0}

    def test_malformed_body_uses_status_error_shape(self, client: TestClient) -> None:
        rejected_before = logger.get_log_statistics()["ingest_counts"]["rejected"]

        for kwargs in ({"content": b"not json", "headers": {"Content-Type": "application/json"}},
                       {"json": [1]},
                       {}):
            response = client.post("/pi-status", **kwargs)
            assert response.status_code == 400
            assert response.json() == {"ok": False, "error": "status must be 0 or 1"}

        assert logger.get_log_statistics()["ingest_counts"]["rejected"] == rejected_before
        assert client.get("/pi-status").json() == {"status": 0}
