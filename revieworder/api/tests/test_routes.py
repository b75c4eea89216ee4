"""
Tests for the HTTP API
"""
import pytest
from fastapi.testclient import TestClient

from revieworder.conftest import text_response, tool_response
from revieworder.exceptions.errors import EngineUnavailableError
from revieworder.main import create_app
from revieworder.services.ordering_service import OrderingService


@pytest.fixture
def make_client():
    def make(adapter) -> TestClient:
        return TestClient(create_app(OrderingService(adapter=adapter)))

    return make


@pytest.fixture
def client(make_client, scripted_adapter):
    return make_client(scripted_adapter())


class TestRunId:
    """Test run id handling"""

    def test_new_run_id(self, client):
        """Test run id generation"""
        res = client.get("/health")

        assert res.status_code == 200
        assert res.json() == {"ok": True}
        assert len(res.headers["X-Run-Id"]) == 32

    def test_client_run_id_echoed(self, client):
        """Test client run id echoed"""
        res = client.get("/health", headers={"X-Run-Id": "ci-build-17"})
        assert res.headers["X-Run-Id"] == "ci-build-17"

    def test_unsafe_client_run_id_replaced(self, client):
        """Test unsafe client run id replaced"""
        res = client.get("/health", headers={"X-Run-Id": "../../etc"})
        assert res.headers["X-Run-Id"] != "../../etc"


def test_tool_schemas(client):
    """Test tool schemas"""
    names = [t["name"] for t in client.get("/schema/tools").json()]
    assert "order_diff" in names
    assert "read_file" in names


def test_prompt(make_client, scripted_adapter):
    """Test the prompt endpoint"""
    client = make_client(scripted_adapter(text_response("hi back")))

    res = client.post("/api/prompt", json={"prompt": "hi"})

    assert res.status_code == 200
    assert res.json() == {"response": "hi back"}


def test_prompt_requires_text(client):
    """Test prompt requires text"""
    res = client.post("/api/prompt", json={"prompt": ""})
    assert res.status_code == 422


def test_order_graph(make_client, scripted_adapter, sample_diff):
    """Test the order endpoint with the graph strategy"""
    client = make_client(
        scripted_adapter(
            tool_response("report_dependencies", {"chunk_id": "src/interfaces.ts", "dependencies": []}),
            text_response("ok"),
            tool_response("report_dependencies", {"chunk_id": "src/userService.ts", "dependencies": ["src/interfaces.ts"]}),
            text_response("ok"),
        )
    )

    res = client.post("/api/order", json={"diff": sample_diff, "strategy": "graph"})

    assert res.status_code == 200
    body = res.json()
    assert body["strategy"] == "graph"
    assert body["total_chunks"] == 2
    assert [c["id"] for c in body["ordered"]] == ["src/interfaces.ts", "src/userService.ts"]
    assert body["dependencies"]["src/userService.ts"] == ["src/interfaces.ts"]
    assert body["run_id"] == res.headers["X-Run-Id"]


def test_order_rejects_unknown_strategy(client):
    """Test order rejects unknown strategy"""
    res = client.post("/api/order", json={"diff": "x", "strategy": "alphabetical"})
    assert res.status_code == 422


def test_unparsable_diff(client):
    """Test unparsable diff"""
    res = client.post("/api/order", json={"diff": "not a diff\n", "strategy": "tags"})

    assert res.status_code == 422
    assert "Unparsable diff" in res.json()["detail"]


def test_engine_unavailable_maps_to_503(make_client, scripted_adapter):
    """Test an unavailable engine maps to 503"""
    def down(transcript, tools):
        raise EngineUnavailableError("LLM backend is unavailable")

    client = make_client(scripted_adapter(down))

    res = client.post("/api/prompt", json={"prompt": "hi"})

    assert res.status_code == 503
    assert res.json()["detail"] == "LLM backend is unavailable"
