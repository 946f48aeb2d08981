import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from interntrack.constants.constants import FEEDBACK_DELIMITER
from interntrack.models.evaluation import Evaluation

logger = logging.getLogger(__name__)


@dataclass
class FeedbackItem:
    text: str
    date: Optional[datetime] = None
    evaluation_id: Optional[str] = None


@dataclass
class FeedbackCorpus:
    """All feedback written about one intern, newest first."""

    intern_id: str
    items: List[FeedbackItem] = field(default_factory=list)

    @property
    def text(self) -> str:
        return FEEDBACK_DELIMITER.join(item.text for item in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items


class FeedbackService:
    """Collects evaluation feedback text for analysis."""

    async def collect_feedback(self, db: AsyncSession, intern_id: str) -> FeedbackCorpus:
        result = await db.execute(
            select(Evaluation.evaluation_id, Evaluation.feedback_text, Evaluation.created_at)
            .where(Evaluation.intern_id == intern_id)
            .order_by(Evaluation.created_at.desc())
        )

        items = [
            FeedbackItem(text=feedback_text.strip(), date=created_at, evaluation_id=evaluation_id)
            for evaluation_id, feedback_text, created_at in result.all()
            if feedback_text and feedback_text.strip()
        ]
        logger.info(f"📝 Collected {len(items)} feedback entries for intern {intern_id}")
        return FeedbackCorpus(intern_id=intern_id, items=items)
