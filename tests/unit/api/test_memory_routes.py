"""Unit tests for the memory, status and health endpoints."""

import asyncio
import time

import pytest
from fastapi.testclient import TestClient

from engram.api.app import create_app
from engram.config.settings import Settings
from engram.db.errors import StorageError
from engram.memory.models import SearchParams
from engram.memory.service import MemoryService
from engram.memory.stores import InMemoryEpisodeStore
from engram.providers.embedding import MockEmbeddingProvider

DIMENSIONS = 4


class FailingSearchStore(InMemoryEpisodeStore):
    """Store whose search always fails in the engine."""

    async def search(self, params: SearchParams):  # noqa: ARG002
        raise StorageError("search episodes", "disk I/O error")


@pytest.fixture
def store() -> InMemoryEpisodeStore:
    return InMemoryEpisodeStore(dimensions=DIMENSIONS)


@pytest.fixture
def provider() -> MockEmbeddingProvider:
    return MockEmbeddingProvider(
        dimensions=DIMENSIONS,
        fixed={
            "dark mode": [1.0, 0.0, 0.0, 0.0],
            "light theme": [0.0, 1.0, 0.0, 0.0],
            "ui colours": [1.0, 0.25, 0.0, 0.0],
        },
    )


@pytest.fixture
def client(store: InMemoryEpisodeStore, provider: MockEmbeddingProvider) -> TestClient:
    service = MemoryService(store, provider)
    return TestClient(create_app(Settings(), service=service))


def add(client: TestClient, content: str, **fields) -> dict:
    response = client.post("/api/v1/memory", json={"content": content, "source": "agent-a", **fields})
    assert response.status_code == 201, response.text
    return response.json()


class TestAddMemory:
    """Tests for POST /api/v1/memory."""

    def test_add_returns_stored_episode(self, client: TestClient) -> None:
        body = add(client, "dark mode", tags=["ui"], metadata={"turn": 3})

        assert body["success"] is True
        assert body["embedded"] is True
        episode = body["episode"]
        assert episode["id"]
        assert episode["group_id"] == "default"
        assert episode["tags"] == ["ui"]
        assert episode["metadata"] == '{"turn":3}'
        assert episode["embedded"] is True
        assert "embedding" not in episode

    def test_add_survives_embedding_outage(
        self, client: TestClient, provider: MockEmbeddingProvider
    ) -> None:
        provider.fail = True

        body = add(client, "dark mode")

        assert body["embedded"] is False
        assert body["episode"]["embedded"] is False

    def test_missing_source_is_invalid_request(self, client: TestClient) -> None:
        response = client.post("/api/v1/memory", json={"content": "dark mode"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INVALID_REQUEST"
        assert any("source" in detail["field"] for detail in error["details"])

    def test_blank_content_is_invalid_request(self, client: TestClient) -> None:
        response = client.post("/api/v1/memory", json={"content": "  ", "source": "agent-a"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_non_json_metadata_is_invalid_request(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/memory",
            json={"content": "dark mode", "source": "agent-a", "metadata": "{oops"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_malformed_timestamp_is_invalid_request(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/memory",
            json={"content": "dark mode", "source": "agent-a", "valid_at": "yesterday"},
        )

        assert response.status_code == 400


class TestSearch:
    """Tests for the search and listing endpoints."""

    def test_semantic_search(self, client: TestClient) -> None:
        light = add(client, "light theme")["episode"]["id"]
        dark = add(client, "dark mode")["episode"]["id"]

        response = client.get("/api/v1/memory/search", params={"query": "ui colours"})

        assert response.status_code == 200
        body = response.json()
        assert body["ranking"] == "semantic"
        assert body["count"] == 2
        assert [ep["id"] for ep in body["episodes"]] == [dark, light]

    def test_search_body_with_tags(self, client: TestClient) -> None:
        tagged = add(client, "dark mode", tags=["ui", "prefs"])["episode"]["id"]
        add(client, "light theme", tags=["ui"])

        response = client.post("/api/v1/memory/search", json={"tags": ["ui", "prefs"]})

        assert [ep["id"] for ep in response.json()["episodes"]] == [tagged]

    def test_query_string_tags_repeat(self, client: TestClient) -> None:
        tagged = add(client, "dark mode", tags=["ui", "prefs"])["episode"]["id"]
        add(client, "light theme", tags=["ui"])

        response = client.get("/api/v1/memory/search", params=[("tags", "ui"), ("tags", "prefs")])

        assert [ep["id"] for ep in response.json()["episodes"]] == [tagged]

    def test_list_episodes_newest_first(self, client: TestClient) -> None:
        first = add(client, "dark mode")["episode"]["id"]
        time.sleep(0.005)
        second = add(client, "light theme")["episode"]["id"]

        response = client.get("/api/v1/memory/episodes", params={"max_results": 5})

        body = response.json()
        assert body["ranking"] == "recency"
        assert [ep["id"] for ep in body["episodes"]] == [second, first]

    def test_group_isolation(self, client: TestClient) -> None:
        add(client, "dark mode", group_id="team-a")

        response = client.get("/api/v1/memory/episodes", params={"group_id": "team-b"})

        assert response.json() == {"episodes": [], "count": 0, "ranking": "recency"}

    def test_storage_failure_maps_to_500(self, provider: MockEmbeddingProvider) -> None:
        service = MemoryService(FailingSearchStore(dimensions=DIMENSIONS), provider)
        client = TestClient(create_app(Settings(), service=service))

        response = client.get("/api/v1/memory/episodes")

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "STORAGE_FAILURE"
        assert "search episodes" in error["message"]


class TestEpisodeEndpoints:
    """Tests for GET and PUT /api/v1/memory/episodes/{id}."""

    def test_get_episode(self, client: TestClient) -> None:
        episode_id = add(client, "dark mode")["episode"]["id"]

        response = client.get(f"/api/v1/memory/episodes/{episode_id}")

        assert response.status_code == 200
        assert response.json()["content"] == "dark mode"

    def test_get_missing_episode_is_404(self, client: TestClient) -> None:
        response = client.get("/api/v1/memory/episodes/nope")

        assert response.status_code == 404
        assert response.json() == {
            "error": {"code": "EPISODE_NOT_FOUND", "message": "episode not found: nope"}
        }

    def test_update_accepts_expires_at_alias(self, client: TestClient) -> None:
        episode_id = add(client, "dark mode", tags=["ui"])["episode"]["id"]

        response = client.put(
            f"/api/v1/memory/episodes/{episode_id}",
            json={"expires_at": "2001-01-01T00:00:00Z", "tags": ["archived"]},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["episode"]["tags"] == ["archived"]
        assert body["episode"]["expired_at"].startswith("2001-01-01T00:00:00")

        listed = client.get("/api/v1/memory/episodes").json()
        assert listed["count"] == 0

    def test_update_without_fields_is_400(self, client: TestClient) -> None:
        episode_id = add(client, "dark mode")["episode"]["id"]

        response = client.put(f"/api/v1/memory/episodes/{episode_id}", json={})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "NO_UPDATES_PROVIDED"

    def test_update_missing_episode_is_404(self, client: TestClient) -> None:
        response = client.put("/api/v1/memory/episodes/nope", json={"tags": ["x"]})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "EPISODE_NOT_FOUND"

    def test_delete_not_exposed(self, client: TestClient) -> None:
        episode_id = add(client, "dark mode")["episode"]["id"]

        response = client.delete(f"/api/v1/memory/episodes/{episode_id}")

        assert response.status_code == 405


class TestHealthAndStatus:
    """Tests for /health, /ready, /metrics and /api/v1/status."""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client: TestClient) -> None:
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json() == {"ready": True, "database_ready": True}

    def test_not_ready_after_store_closed(
        self, client: TestClient, store: InMemoryEpisodeStore
    ) -> None:
        asyncio.run(store.close())

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["ready"] is False

    def test_status(self, client: TestClient) -> None:
        add(client, "dark mode")
        add(client, "light theme")

        response = client.get("/api/v1/status")

        assert response.json() == {
            "status": "operational",
            "episode_count": 2,
            "database_ready": True,
            "embedding_provider": "mock",
        }

    def test_metrics_exposition(self, client: TestClient) -> None:
        add(client, "dark mode")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "engram_episodes_inserted_total" in response.text

    def test_metrics_can_be_disabled(self, store: InMemoryEpisodeStore) -> None:
        settings = Settings(observability={"metrics_enabled": False})
        client = TestClient(create_app(settings, service=MemoryService(store, None)))

        assert client.get("/metrics").status_code == 404
