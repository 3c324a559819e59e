"""Tests for /health."""


async def test_health(async_client):
    r = await async_client.get("/health", headers={"X-Correlation-ID": "corr-1"})
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["correlation_id"] == "corr-1"
    assert "version" in data
