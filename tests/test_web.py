"""Tests for the FastAPI adapter."""

import base64

import pytest
from fastapi.testclient import TestClient

from web.app import app


@pytest.fixture
def client():
    return TestClient(app)


def encode(rom: bytes) -> str:
    return base64.b64encode(rom).decode("ascii")


class TestWebApi:
    """HTTP endpoint tests."""

    def test_health(self, client):
        """Health check answers ok."""
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_run(self, client, assemble):
        """A ROM runs and returns its final state."""
        response = client.post("/api/run", json={
            "rom": encode(assemble(0x6A2A, 0x1202)),
            "options": {"max_steps": 4},
        })
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["final_state"]["v"][0xA] == 0x2A
        assert len(body["display"]) == 32
        assert len(body["display_text"].splitlines()) == 32

    def test_run_with_keys_and_quirks(self, client, assemble):
        """Options map onto RunOptions."""
        response = client.post("/api/run", json={
            "rom": encode(assemble(0xF00A, 0x6103, 0x8216, 0x1206)),
            "options": {"max_steps": 4, "keys": [3], "quirks": {"shift_uses_vy": True}},
        })
        body = response.json()
        assert body["final_state"]["v"][0] == 3
        assert body["final_state"]["v"][2] == 1

    def test_runtime_error(self, client, assemble):
        """Faults come back as status error with details."""
        response = client.post("/api/run", json={"rom": encode(assemble(0x00EE))})
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "error"
        assert body["error"]["type"] == "StackUnderflow"

    def test_bad_base64(self, client):
        """Undecodable ROMs are rejected."""
        response = client.post("/api/run", json={"rom": "not base64!"})
        assert response.status_code == 400

    def test_oversized_rom(self, client):
        """ROMs larger than program memory are rejected."""
        response = client.post("/api/run", json={"rom": encode(bytes(3585))})
        assert response.status_code == 400

    def test_invalid_key(self, client, assemble):
        """Key indices must be hex digits."""
        response = client.post("/api/run", json={
            "rom": encode(assemble(0x1200)),
            "options": {"keys": [16]},
        })
        assert response.status_code == 400
