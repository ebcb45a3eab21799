"""Async HTTP client for submitting complaints to external channels.

Provides ChannelGateway with retry logic (tenacity, 3 attempts, exponential
backoff 1-10s) on transport errors and 5xx responses. Client errors (4xx)
are final and are not retried.

Endpoints are configured per channel name. A channel without an endpoint
yields an unsuccessful SubmissionResult instead of raising, so one missing
integration never blocks the others.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import structlog
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from src.consumidor.channels.effectiveness import CHANNEL_EFFECTIVENESS
from src.consumidor.complaints.schemas import ComplaintRecord
from src.consumidor.core.monitoring import record_channel_submission
from src.consumidor.distribution.schemas import SubmissionResult

logger = structlog.get_logger(__name__)


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return isinstance(exc, (httpx.ConnectError, httpx.TimeoutException))


_channel_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception(_is_retryable),
    reraise=True,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChannelGateway:
    """Submit complaints to external channel APIs.

    Args:
        endpoints: Channel name -> submission URL.
        api_token: Bearer token sent to every endpoint ("" for none).
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests use httpx.MockTransport).
        clock: Timestamp source for submission results.
    """

    def __init__(
        self,
        endpoints: dict[str, str],
        *,
        api_token: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._endpoints = dict(endpoints)
        self._headers = {"Content-Type": "application/json"}
        if api_token:
            self._headers["Authorization"] = f"Bearer {api_token}"
        self._timeout = timeout
        self._transport = transport
        self._clock = clock

    def _metric_label(self, channel: str) -> str:
        """Metric label for a channel; unknown names collapse to "other"."""
        if channel in CHANNEL_EFFECTIVENESS or channel in self._endpoints:
            return channel
        return "other"

    def _client(self) -> httpx.AsyncClient:
        """Create a new httpx client with the configured timeout."""
        return httpx.AsyncClient(
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        )

    @staticmethod
    def _payload(
        complaint: ComplaintRecord,
        company_name: str,
        custom_message: Optional[str],
    ) -> dict[str, Any]:
        return {
            "complaint_id": complaint.id,
            "title": complaint.title,
            "description": complaint.description,
            "company": company_name,
            "category": complaint.category,
            "priority": complaint.priority,
            "custom_message": custom_message,
        }

    @_channel_retry
    async def _post(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        async with self._client() as client:
            response = await client.post(url, json=payload)
            response.raise_for_status()
            if not response.content:
                return {}
            body = response.json()
            return body if isinstance(body, dict) else {}

    async def submit(
        self,
        channel: str,
        complaint: ComplaintRecord,
        company_name: str,
        custom_message: Optional[str] = None,
    ) -> SubmissionResult:
        """Submit one complaint to one channel.

        Returns:
            SubmissionResult; transport and HTTP failures are reported in
            ``error`` rather than raised.
        """
        url = self._endpoints.get(channel)
        if not url:
            logger.info("channel_gateway.no_endpoint", channel=channel)
            record_channel_submission(self._metric_label(channel), success=False)
            return SubmissionResult(
                channel=channel,
                success=False,
                error="no integration configured for channel",
                submitted_at=self._clock(),
            )

        try:
            data = await self._post(url, self._payload(complaint, company_name, custom_message))
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "channel_gateway.submit_failed",
                channel=channel,
                complaint_id=complaint.id,
                error=str(exc),
            )
            record_channel_submission(self._metric_label(channel), success=False)
            return SubmissionResult(
                channel=channel,
                success=False,
                error=str(exc) or exc.__class__.__name__,
                submitted_at=self._clock(),
            )

        protocol = data.get("protocol")
        tracking_url = data.get("tracking_url")

        logger.info(
            "channel_gateway.submitted",
            channel=channel,
            complaint_id=complaint.id,
            protocol=protocol,
        )
        record_channel_submission(self._metric_label(channel), success=True)
        return SubmissionResult(
            channel=channel,
            success=True,
            protocol=str(protocol) if protocol is not None else None,
            tracking_url=str(tracking_url) if tracking_url else None,
            submitted_at=self._clock(),
        )

    async def submit_many(
        self,
        channels: list[str],
        complaint: ComplaintRecord,
        company_name: str,
        custom_message: Optional[str] = None,
    ) -> list[SubmissionResult]:
        """Submit to every channel concurrently; results keep ``channels`` order."""
        return list(
            await asyncio.gather(
                *(
                    self.submit(channel, complaint, company_name, custom_message)
                    for channel in channels
                )
            )
        )


__all__ = ["ChannelGateway"]
