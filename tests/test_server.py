import httpx
import pytest

from contracts import EventType, GenerationResult
from scaling.session_registry import GenerationRegistry
from server import create_app
from streaming.sse import SSEDecoder
from conftest import BRAND_PAYLOAD, FakeHandlers, FakeInference, valid_files


@pytest.fixture
def registry():
    return GenerationRegistry(eviction_seconds=60)


@pytest.fixture
def client(brand, registry):
    app = create_app(
        inference_factory=lambda job_id, session_id: FakeInference(),
        handlers_factory=lambda inference: FakeHandlers(fast_files=valid_files(brand)),
        registry=registry,
    )
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


async def test_stream_returns_sse_frames_ending_in_done(client, registry, brand):
    async with client:
        response = await client.post(
            "/api/builder/stream",
            json={"message": "Build our landing page", "brandContext": BRAND_PAYLOAD, "sessionId": "s1"},
        )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    frames = SSEDecoder().feed(response.text)
    assert frames[0].data["status"] == "Starting generation..."
    assert frames[-1].type == EventType.DONE
    assert frames[-1].data["job_id"] == response.headers["x-job-id"]
    assert GenerationResult.model_validate(frames[-1].data["result"]).files == valid_files(brand)
    assert await registry.active("s1") == []


async def test_blank_message_is_rejected(client):
    async with client:
        response = await client.post(
            "/api/builder/stream", json={"message": "  ", "brandContext": BRAND_PAYLOAD}
        )
    assert response.status_code == 422


async def test_cancel_sets_abort_for_session(client, registry):
    entry = await registry.register("s1", "job-a")

    async with client:
        response = await client.post("/api/builder/cancel", json={"sessionId": "s1"})
        health = await client.get("/health")

    assert response.json() == {"cancelled": 1}
    assert entry.abort.is_set()
    assert health.json() == {"status": "ok", "activeGenerations": 1}


async def test_metrics_are_exposed(client):
    async with client:
        response = await client.get("/metrics/")
    assert response.status_code == 200
    assert "active_generations" in response.text
