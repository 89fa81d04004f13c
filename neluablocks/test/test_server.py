import os
import sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../../')))

import pytest
from fastapi.testclient import TestClient

from neluablocks.server.main import app

GRAPH = {
    "name": "demo",
    "blocks": [{
        "id": "b1",
        "type": "math_number_property",
        "fields": {"PROPERTY": "PRIME"},
        "inputs": {"NUMBER_TO_CHECK": {"block": {"id": "n1", "type": "math_number", "fields": {"NUM": 7}}}},
    }],
}


@pytest.fixture
def client():
    return TestClient(app)


class TestRoutes:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["block_types"] > 0

    def test_block_types(self, client):
        types = client.get("/api/block-types").json()
        assert "controls_if" in types
        assert types == sorted(types)

    def test_generate(self, client):
        response = client.post("/api/generate", json={"graph": GRAPH})
        assert response.status_code == 200
        body = response.json()
        assert body["code"].endswith("local _ = math_isPrime(7)\n")
        assert body["helpers"] == ["math_isPrime"]
        assert body["warnings"] == []

    def test_generate_with_options(self, client):
        response = client.post("/api/generate", json={"graph": GRAPH, "options": {"indent": 4}})
        assert response.status_code == 200
        assert "\n    if n == 2 or n == 3 then\n" in response.json()["code"]

    def test_schema_error(self, client):
        response = client.post("/api/generate", json={"graph": {"name": "x"}})
        assert response.status_code == 400
        assert "blocks" in response.json()["detail"]

    def test_bad_option(self, client):
        response = client.post("/api/generate", json={"graph": GRAPH, "options": {"colour": 1}})
        assert response.status_code == 400

    def test_unknown_type_strict(self, client):
        graph = {"blocks": [{"id": "b1", "type": "colour_picker"}]}
        response = client.post("/api/generate", json={"graph": graph, "strict": True})
        assert response.status_code == 400

    def test_unknown_type_fails_generation(self, client):
        graph = {"blocks": [{"id": "b1", "type": "colour_picker"}]}
        response = client.post("/api/generate", json={"graph": graph})
        assert response.status_code == 422
        assert "colour_picker" in response.json()["detail"]

    def test_bad_mutation_fails_generation(self, client):
        graph = {"blocks": [{"id": "b1", "type": "lists_create_with", "extraState": {"itemCount": "x"}}]}
        response = client.post("/api/generate", json={"graph": graph})
        assert response.status_code == 422
        assert "itemCount" in response.json()["detail"]
