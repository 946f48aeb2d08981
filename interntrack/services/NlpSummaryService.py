import logging
from typing import Any, Callable, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from interntrack.constants.constants import no_feedback_summary
from interntrack.core.exceptions import NotFoundError
from interntrack.models.base import utcnow
from interntrack.models.nlpsummary import NlpSummary
from interntrack.models.user import User
from interntrack.services.FeedbackService import FeedbackService
from interntrack.services.NLPService import FeedbackAnalyzer

logger = logging.getLogger(__name__)


class NlpSummaryService:
    """Computes the aggregate feedback summary for an intern and keeps one stored copy of it."""

    def __init__(
        self,
        analyzer: FeedbackAnalyzer,
        feedback_service: Optional[FeedbackService] = None,
        clock: Callable = utcnow,
    ):
        self.analyzer = analyzer
        self.feedback_service = feedback_service or FeedbackService()
        self.clock = clock

    async def _get_aggregate_row(self, db: AsyncSession, intern_id: str) -> Optional[NlpSummary]:
        result = await db.execute(
            select(NlpSummary)
            .where(
                NlpSummary.intern_id == intern_id,
                NlpSummary.evaluation_id.is_(None)
            )
            .order_by(NlpSummary.analysis_date.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def build_payload(self, db: AsyncSession, intern_id: str) -> Dict[str, Any]:
        corpus = await self.feedback_service.collect_feedback(db, intern_id)
        if corpus.is_empty:
            logger.info(f"No feedback found for intern {intern_id}, storing placeholder summary")
            return no_feedback_summary()
        return self.analyzer.run_pipeline(corpus)

    async def generate_and_store_summary(self, db: AsyncSession, intern_id: str) -> NlpSummary:
        """
        Recompute the aggregate summary and upsert it.

        The row with a null evaluation_id is updated in place when present,
        otherwise a new one is inserted.
        """
        intern = await db.get(User, intern_id)
        if not intern:
            raise NotFoundError(f"Intern '{intern_id}' not found", extra={"intern_id": intern_id})

        payload = await self.build_payload(db, intern_id)
        now = self.clock()

        summary = await self._get_aggregate_row(db, intern_id)
        if summary:
            summary.summary_json = payload
            summary.analysis_date = now
            logger.info(f"🔁 Updated NLP summary for intern {intern_id}")
        else:
            summary = NlpSummary(
                intern_id=intern_id,
                evaluation_id=None,
                summary_json=payload,
                analysis_date=now,
            )
            db.add(summary)
            logger.info(f"✅ Created NLP summary for intern {intern_id}")

        await db.commit()
        await db.refresh(summary)
        return summary

    async def get_summary(self, db: AsyncSession, intern_id: str) -> Optional[NlpSummary]:
        """Stored aggregate summary, without recomputing."""
        return await self._get_aggregate_row(db, intern_id)
