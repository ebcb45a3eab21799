"""Distribution orchestrator -- channel plans and complaint distribution.

Builds ranked channel plans from the deterministic ChannelScorer, optionally
decorated with an untrusted advisor's suggestions, and distributes complaints
to user-selected channels through the ChannelGateway. The only write is the
final store write-back in ``distribute``.

Exports:
    DistributionOrchestrator: build_plan and distribute.
    DEFAULT_SUCCESS_RATE / DEFAULT_RESOLUTION_TIME: Plan estimates used
        without advisory input.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Optional

import structlog

from src.consumidor.channels.scorer import ChannelScorer
from src.consumidor.complaints.schemas import (
    ComplaintRecord,
    ComplaintUpdate,
    UpdateSource,
)
from src.consumidor.complaints.store import ComplaintStore
from src.consumidor.core.errors import ComplaintNotFoundError
from src.consumidor.distribution.advisory import MediationAdvisor
from src.consumidor.distribution.gateway import ChannelGateway
from src.consumidor.distribution.schemas import (
    AdvisorySuggestion,
    DistributionPlan,
    DistributionResult,
    DistributionStrategy,
    SubmissionResult,
)

logger = structlog.get_logger(__name__)

DEFAULT_SUCCESS_RATE = 75.0
DEFAULT_RESOLUTION_TIME = "30 dias"
PRIMARY_CHANNEL_COUNT = 3

NEXT_STEPS = (
    "Acompanhe o status da sua reclamação no dashboard",
    "Você receberá notificações quando houver atualizações",
    "Responda prontamente a quaisquer solicitações adicionais",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DistributionOrchestrator:
    """Plan and perform complaint distribution.

    Args:
        store: Complaint record store.
        scorer: Channel scorer used for every ranking.
        gateway: External submission client. Without one, distribution
            records the channels but submits nowhere.
        advisor: Optional mediation advisor for plan suggestions.
        clock: Timestamp source for the distribution update.
    """

    def __init__(
        self,
        store: ComplaintStore,
        scorer: ChannelScorer,
        *,
        gateway: Optional[ChannelGateway] = None,
        advisor: Optional[MediationAdvisor] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._scorer = scorer
        self._gateway = gateway
        self._advisor = advisor
        self._clock = clock

    async def _load(self, complaint_id: str) -> tuple[ComplaintRecord, str]:
        complaint = await self._store.get_complaint(complaint_id)
        if complaint is None:
            raise ComplaintNotFoundError(complaint_id)
        company = await self._store.get_company(complaint.company_id)
        company_name = company.name if company else complaint.company_id
        return complaint, company_name

    async def _advise(
        self, complaint: ComplaintRecord, company_name: str
    ) -> Optional[AdvisorySuggestion]:
        """Ask the advisor for suggestions; any failure means no advisory."""
        if self._advisor is None:
            return None
        try:
            return await self._advisor.suggest(complaint, company_name)
        except Exception:
            logger.warning(
                "distribution.advisor_failed",
                complaint_id=complaint.id,
                exc_info=True,
            )
            return None

    @staticmethod
    def _strategy(
        complaint: ComplaintRecord, advisory: Optional[AdvisorySuggestion]
    ) -> DistributionStrategy:
        if advisory is not None:
            reasoning = (
                "Análise combinando IA com dados históricos. "
                f'Baseado na categoria "{complaint.category}" e prioridade '
                f'"{complaint.priority}", com {len(advisory.similar_cases)} '
                "casos similares encontrados."
            )
        else:
            reasoning = (
                f'Baseado na categoria "{complaint.category}" e prioridade '
                f'"{complaint.priority}", selecionamos canais com maior '
                "probabilidade de sucesso e tempo de resolução adequado."
            )

        success_rate = DEFAULT_SUCCESS_RATE
        resolution_time = DEFAULT_RESOLUTION_TIME
        if advisory is not None:
            if advisory.success_probability:
                success_rate = advisory.success_probability
            if advisory.estimated_resolution_time:
                resolution_time = advisory.estimated_resolution_time

        return DistributionStrategy(
            reasoning=reasoning,
            estimated_success_rate=success_rate,
            estimated_resolution_time=resolution_time,
        )

    # ── Public API ──────────────────────────────────────────────────────────

    async def build_plan(self, complaint_id: str) -> DistributionPlan:
        """Rank the recommended channels for a complaint.

        Raises:
            ComplaintNotFoundError: If the complaint does not exist.
        """
        complaint, company_name = await self._load(complaint_id)
        advisory = await self._advise(complaint, company_name)

        candidates = self._scorer.recommend_channels(complaint.category, complaint.priority)
        analysis = self._scorer.rank_and_explain(
            candidates, complaint.category, complaint.priority
        )

        logger.info(
            "distribution.plan_built",
            complaint_id=complaint_id,
            candidates=len(candidates),
            advisory=advisory is not None,
        )
        return DistributionPlan(
            complaint_id=complaint.id,
            category=complaint.category,
            priority=complaint.priority,
            company_name=company_name,
            recommended_channels=candidates,
            channel_analysis=analysis,
            primary_channels=[r.channel for r in analysis[:PRIMARY_CHANNEL_COUNT]],
            secondary_channels=[r.channel for r in analysis[PRIMARY_CHANNEL_COUNT:]],
            advisory=advisory,
            strategy=self._strategy(complaint, advisory),
        )

    async def distribute(
        self,
        complaint_id: str,
        selected_channels: list[str],
        custom_message: Optional[str] = None,
    ) -> DistributionResult:
        """Submit a complaint to the selected channels and record the outcome.

        Gateway failures are logged and leave the submission list empty; the
        store write-back always happens.

        Raises:
            ValueError: If no channel is selected.
            ComplaintNotFoundError: If the complaint does not exist.
        """
        if not selected_channels:
            raise ValueError("at least one channel must be selected")

        complaint, company_name = await self._load(complaint_id)
        analysis = self._scorer.rank_and_explain(
            selected_channels, complaint.category, complaint.priority
        )

        submissions: list[SubmissionResult] = []
        if self._gateway is not None:
            try:
                submissions = await self._gateway.submit_many(
                    selected_channels, complaint, company_name, custom_message
                )
            except Exception:
                logger.error(
                    "distribution.submission_failed",
                    complaint_id=complaint_id,
                    exc_info=True,
                )
                submissions = []

        tracking_urls = [s.tracking_url for s in submissions if s.success and s.tracking_url]
        now = self._clock()
        submissions_json = [s.model_dump(mode="json") for s in submissions]

        message = f"Reclamação distribuída para os canais: {', '.join(selected_channels)}."
        if tracking_urls:
            message += f" Links de acompanhamento: {', '.join(tracking_urls)}"

        await self._store.record_distribution(
            complaint_id,
            selected_channels,
            {
                "submissions": submissions_json,
                "tracking_urls": tracking_urls,
                "submitted_at": now.isoformat(),
            },
            ComplaintUpdate(
                message=message,
                source=UpdateSource.SYSTEM,
                metadata={
                    "action": "distributed",
                    "channels": selected_channels,
                    "channel_analysis": [r.model_dump(mode="json") for r in analysis],
                    "custom_message": custom_message,
                    "external_submissions": submissions_json,
                    "tracking_urls": tracking_urls,
                },
                created_at=now,
            ),
        )

        successful = sum(1 for s in submissions if s.success)
        logger.info(
            "distribution.submitted",
            complaint_id=complaint_id,
            channels=selected_channels,
            successful_submissions=successful,
        )

        return DistributionResult(
            complaint_id=complaint_id,
            selected_channels=list(selected_channels),
            channel_analysis=analysis,
            total_channels=len(selected_channels),
            recommended_channels=sum(1 for r in analysis if r.recommended),
            estimated_resolution_time=min(r.effectiveness.avg_time for r in analysis),
            submissions=submissions,
            successful_submissions=successful,
            tracking_urls=tracking_urls,
            next_steps=[
                *NEXT_STEPS,
                *(
                    f"Acompanhe no canal {index}: {url}"
                    for index, url in enumerate(tracking_urls, start=1)
                ),
            ],
        )


__all__ = [
    "DistributionOrchestrator",
    "DEFAULT_SUCCESS_RATE",
    "DEFAULT_RESOLUTION_TIME",
]
