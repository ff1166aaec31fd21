import pytest
from httpx import ASGITransport, AsyncClient

from clock.features.timer.service import TimerService, get_timer_service
from clock.main import app


@pytest.fixture
async def service(store, notifier, clock):
    service = TimerService(store=store, notifier=notifier, clock=clock, interval=0.01)
    app.dependency_overrides[get_timer_service] = lambda: service
    yield service
    app.dependency_overrides.clear()
    await service.shutdown()


@pytest.fixture
async def client(service):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def test_root(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["message"] == "Clock Timer API"


async def test_health(client):
    response = await client.get("/api/health/")
    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "service": "clock-timer",
        "timer_ticking": False,
    }


async def test_no_active_timer(client):
    response = await client.get("/api/timer/")
    assert response.status_code == 200
    assert response.json()["active"] is False


async def test_timer_lifecycle(client, clock):
    response = await client.post("/api/timer/", json={"duration_ms": 5000, "sound": "bell.ogg"})
    assert response.status_code == 200
    body = response.json()
    assert body["active"] is True
    assert body["state"] == "STARTED"
    assert body["remaining"] == 5000
    assert body["display"] == "00:05"
    assert body["sound"] == "bell.ogg"

    health = await client.get("/api/health/")
    assert health.json()["timer_ticking"] is True

    clock.advance(2000)
    response = await client.post("/api/timer/pause")
    assert response.status_code == 200
    assert response.json()["state"] == "PAUSED"
    assert response.json()["remaining"] == 3000
    assert response.json()["pause_at"] == clock.now

    response = await client.post("/api/timer/resume")
    assert response.status_code == 200
    assert response.json()["state"] == "STARTED"
    assert response.json()["remaining"] == 5000

    response = await client.post("/api/timer/cancel")
    assert response.status_code == 200
    assert response.json()["active"] is False


async def test_invalid_transitions(client):
    response = await client.post("/api/timer/pause")
    assert response.status_code == 404

    response = await client.post("/api/timer/cancel")
    assert response.status_code == 404

    await client.post("/api/timer/", json={"duration_ms": 5000})
    response = await client.post("/api/timer/resume")
    assert response.status_code == 409


async def test_rejects_non_positive_duration(client):
    response = await client.post("/api/timer/", json={"duration_ms": 0})
    assert response.status_code == 422
