"""Tests for /health and /metrics endpoints."""

from datetime import datetime

import pytest

from odds_mcp.services.metrics import metrics_service


@pytest.mark.asyncio
async def test_health(test_client):
    response = await test_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "odds-api-mcp-server"
    assert datetime.fromisoformat(data["timestamp"]).tzinfo is not None


@pytest.mark.asyncio
async def test_health_is_not_an_mcp_route(test_client, session_manager):
    await test_client.get("/health")

    assert len(session_manager) == 0


@pytest.mark.asyncio
async def test_metrics_reports_active_sessions(test_client):
    await metrics_service.reset()
    await test_client.post(
        "/mcp",
        json={"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}},
    )

    response = await test_client.get("/metrics")

    assert response.status_code == 200
    data = response.json()
    assert data["sessions"]["active"] == 1
    assert data["sessions"]["opened"] == 1
    assert data["requests"]["total"] == 1


@pytest.mark.asyncio
async def test_metrics_reset(test_client):
    await metrics_service.track_request()

    response = await test_client.post("/metrics/reset")

    assert response.status_code == 200
    assert response.json() == {"status": "reset"}
    metrics = await test_client.get("/metrics")
    assert metrics.json()["requests"]["total"] == 0
