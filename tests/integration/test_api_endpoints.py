"""
Integration tests for the streaming API.
Tests session lifecycle, error mapping and response formats.
"""
import pytest
import numpy as np
from fastapi.testclient import TestClient
from ecg_engine.api import app
from ecg_engine.constants import LEAD_NAMES

EXPECTED_LEADS = ["I", "II", "III", "aVR", "aVL", "aVF", "V1", "V2", "V3", "V4", "V5", "V6"]

class TestAPIEndpoints:
    """Test streaming API functionality."""

    @pytest.fixture
    def client(self):
        """Create test client for API testing."""
        return TestClient(app)

    @pytest.fixture
    def session_id(self, client, nsr_document):
        response = client.post("/sessions", json=nsr_document)
        assert response.status_code == 201
        yield response.json()["session_id"]
        client.delete(f"/sessions/{response.json()['session_id']}")

    @pytest.mark.integration
    def test_list_rhythms(self, client):
        response = client.get("/rhythms")

        assert response.status_code == 200
        ids = [rhythm["id"] for rhythm in response.json()["rhythms"]]
        assert "nsr_80" in ids
        assert "timeline_ectopy" in ids

    @pytest.mark.integration
    def test_get_rhythm_document(self, client):
        response = client.get("/rhythms/nsr_80")

        assert response.status_code == 200
        assert response.json()["generator"]["sampleRateHz"] == 240
        assert client.get("/rhythms/does_not_exist").status_code == 404

    @pytest.mark.integration
    def test_create_session_from_spec(self, client, nsr_document):
        response = client.post("/sessions", json=nsr_document)

        assert response.status_code == 201
        data = response.json()
        assert data["mode"] == "parametric"
        assert data["sample_rate_hz"] == 240
        assert data["rhythm_description"].startswith("Parametric rhythm at 80bpm")

    @pytest.mark.integration
    def test_create_session_from_preset(self, client):
        response = client.post("/sessions", json={"preset": "timeline_ectopy"})

        assert response.status_code == 201
        assert response.json()["mode"] == "timeline"

    @pytest.mark.integration
    def test_unknown_preset(self, client):
        response = client.post("/sessions", json={"preset": "nope"})
        assert response.status_code == 404

    @pytest.mark.integration
    @pytest.mark.parametrize("preset", [["nsr_80"], {"id": "nsr_80"}, 80, None])
    def test_non_string_preset_rejected(self, client, preset):
        response = client.post("/sessions", json={"preset": preset})
        assert response.status_code == 422

    @pytest.mark.integration
    def test_session_limit(self, client, monkeypatch):
        monkeypatch.setattr(app.state, "sessions", {})
        monkeypatch.setattr("ecg_engine.api.MAX_SESSIONS", 2)

        created = [client.post("/sessions", json={"preset": "nsr_80"}) for _ in range(2)]
        assert [r.status_code for r in created] == [201, 201]
        assert client.post("/sessions", json={"preset": "nsr_80"}).status_code == 429

        client.delete(f"/sessions/{created[0].json()['session_id']}")
        assert client.post("/sessions", json={"preset": "nsr_80"}).status_code == 201

    @pytest.mark.integration
    def test_mismatched_spec_is_config_error(self, client, mismatched_spec_document):
        response = client.post("/sessions", json=mismatched_spec_document)

        assert response.status_code == 422
        assert response.json()["error"] == "ConfigError"

    @pytest.mark.integration
    def test_samples_response_structure(self, client, session_id):
        response = client.get(f"/sessions/{session_id}/samples", params={"seconds": 2.0})

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"tStart", "dt", "data"}
        assert data["tStart"] == 0.0
        assert data["dt"] == pytest.approx(1 / 240)
        for lead in EXPECTED_LEADS:
            assert lead in data["data"], f"Lead {lead} missing from response"
            assert len(data["data"][lead]) == 480
        assert any(abs(x) > 0.5 for x in data["data"]["II"]), "Signal appears to be empty"

    @pytest.mark.integration
    def test_samples_continue_across_requests(self, client, session_id):
        first = client.get(f"/sessions/{session_id}/samples", params={"seconds": 1.0}).json()
        second = client.get(f"/sessions/{session_id}/samples", params={"seconds": 1.0}).json()

        assert second["tStart"] == pytest.approx(first["tStart"] + 1.0)

    @pytest.mark.integration
    def test_default_chunk(self, client, session_id):
        data = client.get(f"/sessions/{session_id}/samples").json()
        assert len(data["data"]["II"]) == 60

    @pytest.mark.integration
    @pytest.mark.parametrize("seconds", [0, -1, 1e6])
    def test_sample_duration_bounds(self, client, session_id, seconds):
        response = client.get(f"/sessions/{session_id}/samples", params={"seconds": seconds})
        assert response.status_code == 422

    @pytest.mark.integration
    def test_reset(self, client, session_id):
        client.get(f"/sessions/{session_id}/samples", params={"seconds": 1.5})
        response = client.post(f"/sessions/{session_id}/reset")

        assert response.status_code == 200
        assert response.json()["t"] == 0.0
        data = client.get(f"/sessions/{session_id}/samples", params={"seconds": 0.5}).json()
        assert data["tStart"] == 0.0

    @pytest.mark.integration
    def test_sessions_do_not_share_cursors(self, client, nsr_document):
        first = client.post("/sessions", json=nsr_document).json()["session_id"]
        second = client.post("/sessions", json=nsr_document).json()["session_id"]

        client.get(f"/sessions/{first}/samples", params={"seconds": 3.0})
        data = client.get(f"/sessions/{second}/samples", params={"seconds": 1.0}).json()

        assert data["tStart"] == 0.0
        client.delete(f"/sessions/{first}")
        client.delete(f"/sessions/{second}")

    @pytest.mark.integration
    def test_sessions_replay_identically(self, client, nsr_document):
        first = client.post("/sessions", json=nsr_document).json()["session_id"]
        second = client.post("/sessions", json=nsr_document).json()["session_id"]

        a = client.get(f"/sessions/{first}/samples", params={"seconds": 1.0}).json()
        b = client.get(f"/sessions/{second}/samples", params={"seconds": 1.0}).json()

        for lead in LEAD_NAMES:
            np.testing.assert_array_equal(a["data"][lead], b["data"][lead])

    @pytest.mark.integration
    def test_delete_session(self, client, nsr_document):
        session = client.post("/sessions", json=nsr_document).json()["session_id"]

        assert client.delete(f"/sessions/{session}").status_code == 204
        assert client.get(f"/sessions/{session}/samples").status_code == 404
        assert client.delete(f"/sessions/{session}").status_code == 404

    @pytest.mark.integration
    def test_stream_websocket(self, client, session_id):
        url = f"/sessions/{session_id}/stream?chunk_sec=0.05&max_chunks=3"
        with client.websocket_connect(url) as websocket:
            chunks = [websocket.receive_json() for _ in range(3)]

        assert [len(chunk["data"]["II"]) for chunk in chunks] == [12, 12, 12]
        for previous, current in zip(chunks, chunks[1:]):
            assert current["tStart"] == pytest.approx(previous["tStart"] + 12 * previous["dt"])

class TestServiceRoot:
    """Root app: health endpoints and the engine mounted under /api."""

    @pytest.fixture
    def client(self):
        from main import app as root_app
        return TestClient(root_app)

    @pytest.mark.integration
    def test_root_and_health(self, client):
        assert client.get("/").json()["status"] == "ok"
        assert client.get("/health").json() == {"status": "healthy"}

    @pytest.mark.integration
    def test_engine_mounted_under_api(self, client):
        response = client.post("/api/sessions", json={"preset": "sinus_brady_45"})
        assert response.status_code == 201
        session_id = response.json()["session_id"]

        data = client.get(f"/api/sessions/{session_id}/samples", params={"seconds": 1.0}).json()
        assert len(data["data"]["V6"]) == 240
        assert client.delete(f"/api/sessions/{session_id}").status_code == 204
