"""Tests for ChannelGateway using httpx.MockTransport.

Retry backoff is disabled through the tenacity ``retry`` handle so retried
cases run instantly.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone

import httpx
import pytest
from tenacity import wait_none

from src.consumidor.complaints.schemas import ComplaintRecord
from src.consumidor.core.monitoring import channel_submissions_total
from src.consumidor.distribution.gateway import ChannelGateway

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)
ENDPOINTS = {"Procon": "https://procon.example/api/complaints"}


@pytest.fixture(autouse=True)
def _no_backoff(monkeypatch):
    monkeypatch.setattr(ChannelGateway._post.retry, "wait", wait_none())


@pytest.fixture
def complaint() -> ComplaintRecord:
    return ComplaintRecord(
        id="cmp-1",
        company_id="vivo",
        title="Cobrança indevida",
        description="Cobrança de serviço não contratado",
        category="telecom",
        priority="HIGH",
        created_at=NOW,
    )


def _gateway(handler, **kwargs) -> ChannelGateway:
    return ChannelGateway(
        ENDPOINTS,
        transport=httpx.MockTransport(handler),
        clock=lambda: NOW,
        **kwargs,
    )


class TestSubmit:
    @pytest.mark.asyncio
    async def test_success(self, complaint: ComplaintRecord) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                201, json={"protocol": 12345, "tracking_url": "https://procon.example/t/1"}
            )

        result = await _gateway(handler, api_token="secret").submit(
            "Procon", complaint, "Vivo", "Quero reembolso"
        )

        assert result.success is True
        assert result.protocol == "12345"
        assert result.tracking_url == "https://procon.example/t/1"
        assert result.submitted_at == NOW
        assert seen[0].headers["Authorization"] == "Bearer secret"
        body = json.loads(seen[0].content)
        assert body["complaint_id"] == "cmp-1"
        assert body["company"] == "Vivo"
        assert body["custom_message"] == "Quero reembolso"

    @pytest.mark.asyncio
    async def test_empty_body(self, complaint: ComplaintRecord) -> None:
        result = await _gateway(lambda request: httpx.Response(204)).submit(
            "Procon", complaint, "Vivo"
        )
        assert result.success is True
        assert result.protocol is None
        assert result.tracking_url is None

    @pytest.mark.asyncio
    async def test_missing_endpoint(self, complaint: ComplaintRecord) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        result = await _gateway(handler).submit("Anatel", complaint, "Vivo")
        assert result.success is False
        assert result.error == "no integration configured for channel"

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self, complaint: ComplaintRecord) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(422, json={"detail": "invalid"})

        result = await _gateway(handler).submit("Procon", complaint, "Vivo")
        assert result.success is False
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_server_error_retried_then_succeeds(self, complaint: ComplaintRecord) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) < 3:
                return httpx.Response(503)
            return httpx.Response(200, json={"protocol": "ABC"})

        result = await _gateway(handler).submit("Procon", complaint, "Vivo")
        assert result.success is True
        assert result.protocol == "ABC"
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_connect_error_exhausts_retries(self, complaint: ComplaintRecord) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        result = await _gateway(handler).submit("Procon", complaint, "Vivo")
        assert result.success is False
        assert "connection refused" in result.error
        assert len(calls) == 3


class TestSubmitMany:
    @pytest.mark.asyncio
    async def test_keeps_channel_order(self, complaint: ComplaintRecord) -> None:
        gateway = _gateway(lambda request: httpx.Response(200, json={"protocol": "X"}))
        results = await gateway.submit_many(["Anatel", "Procon"], complaint, "Vivo")
        assert [r.channel for r in results] == ["Anatel", "Procon"]
        assert [r.success for r in results] == [False, True]


def _submission_series() -> set[tuple[str, str]]:
    return {
        (sample.labels["channel"], sample.labels["status"])
        for metric in channel_submissions_total.collect()
        for sample in metric.samples
        if sample.name.endswith("_total")
    }


class TestSubmissionMetrics:
    @pytest.mark.asyncio
    async def test_free_text_channels_share_one_label(self, complaint: ComplaintRecord) -> None:
        gateway = _gateway(lambda request: httpx.Response(200, json={}))
        before = _submission_series()
        other_before = channel_submissions_total.labels(
            channel="other", status="failure"
        )._value.get()

        for _ in range(20):
            await gateway.submit(f"user-{uuid.uuid4()}", complaint, "Vivo")

        new_series = _submission_series() - before
        assert new_series <= {("other", "failure")}
        assert (
            channel_submissions_total.labels(channel="other", status="failure")._value.get()
            == other_before + 20
        )

    @pytest.mark.asyncio
    async def test_known_channels_keep_their_label(self, complaint: ComplaintRecord) -> None:
        gateway = _gateway(lambda request: httpx.Response(200, json={}))
        procon_before = channel_submissions_total.labels(
            channel="Procon", status="success"
        )._value.get()
        anatel_before = channel_submissions_total.labels(
            channel="Anatel", status="failure"
        )._value.get()

        await gateway.submit("Procon", complaint, "Vivo")
        await gateway.submit("Anatel", complaint, "Vivo")

        assert (
            channel_submissions_total.labels(channel="Procon", status="success")._value.get()
            == procon_before + 1
        )
        assert (
            channel_submissions_total.labels(channel="Anatel", status="failure")._value.get()
            == anatel_before + 1
        )
