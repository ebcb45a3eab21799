"""API tests for the v1 companies, channels and complaints endpoints.

Builds a minimal FastAPI app around the v1 router, wires real services over
the in-memory complaint store onto app.state, and drives it with
httpx.AsyncClient + ASGITransport.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.consumidor.channels.scorer import ChannelScorer
from src.consumidor.complaints.schemas import ComplaintStatus
from src.consumidor.distribution.orchestrator import DistributionOrchestrator
from src.consumidor.reputation.service import ReputationService

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def _make_app():
    """Create a minimal FastAPI app with the v1 router mounted."""
    from fastapi import FastAPI

    from src.consumidor.api.v1.router import router

    app = FastAPI()
    app.include_router(router, prefix="/api/v1")
    return app


@pytest_asyncio.fixture
async def client_and_store(store):
    """Test client with services over InMemoryComplaintStore on app.state."""
    app = _make_app()
    scorer = ChannelScorer()
    app.state.channel_scorer = scorer
    app.state.reputation_service = ReputationService(store, clock=lambda: NOW)
    app.state.distribution_orchestrator = DistributionOrchestrator(
        store, scorer, clock=lambda: NOW
    )

    store.add_company("vivo", name="Vivo")
    store.add_company("tim", name="TIM")
    for _ in range(3):
        store.add_complaint(
            "vivo", status=ComplaintStatus.RESOLVED, resolved_after_days=4, updates=1
        )
    store.add_complaint("tim", complaint_id="cmp-tim")

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client, store


@pytest_asyncio.fixture
async def bare_client():
    """Client whose app.state holds no services."""
    transport = ASGITransport(app=_make_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ── Companies ────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_get_reputation(client_and_store):
    """GET /companies/{id}/reputation -> 200 with rounded snapshot."""
    client, _ = client_and_store

    response = await client.get("/api/v1/companies/vivo/reputation")
    assert response.status_code == 200
    data = response.json()
    assert data["company_name"] == "Vivo"
    assert data["total_complaints"] == 3
    assert data["resolved_complaints"] == 3
    assert data["average_resolution_time"] == 4
    assert data["category_ranking"] == {"category": "telecom", "rank": 1, "total_companies": 2}
    assert "Resolutivo" in data["badges"]


@pytest.mark.asyncio
async def test_get_reputation_not_found(client_and_store):
    client, _ = client_and_store
    response = await client.get("/api/v1/companies/missing/reputation")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_refresh_and_history(client_and_store):
    """POST refresh persists a point that GET history returns."""
    client, store = client_and_store

    response = await client.post("/api/v1/companies/vivo/reputation/refresh")
    assert response.status_code == 200
    assert store.reputations["vivo"].overall_score == response.json()["overall_score"]

    response = await client.get("/api/v1/companies/vivo/reputation/history", params={"days": 30})
    assert response.status_code == 200
    points = response.json()
    assert len(points) == 1
    assert points[0]["company_id"] == "vivo"


@pytest.mark.asyncio
async def test_history_days_validated(client_and_store):
    client, _ = client_and_store
    response = await client.get("/api/v1/companies/vivo/reputation/history", params={"days": 3})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_top_companies(client_and_store):
    client, _ = client_and_store
    response = await client.get("/api/v1/companies/top", params={"limit": 5})
    assert response.status_code == 200
    assert [r["company_id"] for r in response.json()] == ["vivo", "tim"]


@pytest.mark.asyncio
async def test_top_companies_limit_validated(client_and_store):
    client, _ = client_and_store
    response = await client.get("/api/v1/companies/top", params={"limit": 101})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_category_ranking(client_and_store):
    client, _ = client_and_store
    response = await client.get("/api/v1/companies/tim/ranking")
    assert response.status_code == 200
    assert response.json() == {
        "company_id": "tim",
        "category_ranking": {"category": "telecom", "rank": 2, "total_companies": 2},
    }


@pytest.mark.asyncio
async def test_company_details(client_and_store):
    """GET /companies/{id} -> profile with statistics and distributions."""
    client, _ = client_and_store

    response = await client.get("/api/v1/companies/vivo")
    assert response.status_code == 200
    data = response.json()
    assert data["company"]["name"] == "Vivo"
    assert data["reputation"]["company_id"] == "vivo"
    assert data["statistics"] == {
        "total_complaints": 3,
        "resolved_complaints": 3,
        "pending_complaints": 0,
        "resolution_rate": 1.0,
    }
    assert data["status_distribution"]["RESOLVED"] == 3
    assert data["category_distribution"] == {"telecom": 3}
    assert len(data["recent_complaints"]) == 3


@pytest.mark.asyncio
async def test_company_details_not_found(client_and_store):
    client, _ = client_and_store
    response = await client.get("/api/v1/companies/missing")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_companies_unavailable(bare_client):
    response = await bare_client.get("/api/v1/companies/vivo/reputation")
    assert response.status_code == 503


# ── Channels ─────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_channel_recommendations(client_and_store):
    """GET /channels/recommendations -> candidates plus ranked analysis."""
    client, _ = client_and_store

    response = await client.get(
        "/api/v1/channels/recommendations",
        params={"category": "banking", "priority": "HIGH"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["recommended_channels"][-2:] == ["Ministério Público", "Defensoria Pública"]
    top = data["channel_analysis"][0]
    assert top["channel"] == "Banco Central"
    assert top["score"] == 112
    assert top["recommended"] is True


@pytest.mark.asyncio
async def test_channel_recommendations_unknown_category(client_and_store):
    client, _ = client_and_store
    response = await client.get(
        "/api/v1/channels/recommendations", params={"category": "viagens"}
    )
    assert response.status_code == 200
    assert response.json()["recommended_channels"] == [
        "Procon",
        "Reclame Aqui",
        "Ouvidoria da Empresa",
    ]


@pytest.mark.asyncio
async def test_channel_recommendations_requires_category(client_and_store):
    client, _ = client_and_store
    response = await client.get("/api/v1/channels/recommendations")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_channels_unavailable(bare_client):
    response = await bare_client.get(
        "/api/v1/channels/recommendations", params={"category": "telecom"}
    )
    assert response.status_code == 503


# ── Complaints ───────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_distribution_plan(client_and_store):
    client, _ = client_and_store
    response = await client.get("/api/v1/complaints/cmp-tim/distribution")
    assert response.status_code == 200
    data = response.json()
    assert data["company_name"] == "TIM"
    assert data["primary_channels"] == ["Anatel", "Procon", "Reclame Aqui"]


@pytest.mark.asyncio
async def test_distribution_plan_not_found(client_and_store):
    client, _ = client_and_store
    response = await client.get("/api/v1/complaints/missing/distribution")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_distribute(client_and_store):
    client, store = client_and_store

    response = await client.post(
        "/api/v1/complaints/cmp-tim/distribution",
        json={
            "selected_channels": ["Anatel", "Procon"],
            "custom_message": "Solicito cancelamento",
            "authorize_distribution": True,
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["total_channels"] == 2
    assert data["recommended_channels"] == 2
    assert data["estimated_resolution_time"] == 45

    stored = await store.get_complaint("cmp-tim")
    assert stored.status == ComplaintStatus.WAITING
    assert stored.channels == ["Anatel", "Procon"]


@pytest.mark.asyncio
async def test_distribute_requires_authorization(client_and_store):
    client, store = client_and_store
    response = await client.post(
        "/api/v1/complaints/cmp-tim/distribution",
        json={"selected_channels": ["Anatel"], "authorize_distribution": False},
    )
    assert response.status_code == 422
    assert store.distributions == []


@pytest.mark.asyncio
async def test_distribute_requires_channels(client_and_store):
    client, _ = client_and_store
    response = await client.post(
        "/api/v1/complaints/cmp-tim/distribution",
        json={"selected_channels": [], "authorize_distribution": True},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_distribute_not_found(client_and_store):
    client, _ = client_and_store
    response = await client.post(
        "/api/v1/complaints/missing/distribution",
        json={"selected_channels": ["Procon"], "authorize_distribution": True},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_distribution_unavailable(bare_client):
    response = await bare_client.get("/api/v1/complaints/cmp-1/distribution")
    assert response.status_code == 503


# ── Health ───────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(bare_client):
    response = await bare_client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
