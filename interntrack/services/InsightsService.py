import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from interntrack.constants.constants import unavailable_nlp_summary
from interntrack.core.exceptions import NotFoundError
from interntrack.models.evaluation import Evaluation
from interntrack.models.user import User
from interntrack.services.GitHubMetricsService import GitHubMetricsService
from interntrack.services.NlpSummaryService import NlpSummaryService
from interntrack.services.TaskCompletionService import TaskCompletion, TaskCompletionService

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SourceState(str, Enum):
    """How a section of the insights object was produced."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    ERROR = "error"


@dataclass
class SourceResult(Generic[T]):
    """A section value together with whether it is real data or a fallback."""

    state: SourceState
    value: T
    error: Optional[str] = None

    @property
    def is_available(self) -> bool:
        return self.state == SourceState.AVAILABLE


def empty_github_summary() -> Dict[str, Any]:
    return {"totalCommits": 0, "totalAdditions": 0, "totalDeletions": 0, "repos": []}


class InsightsService:
    """
    Merges GitHub activity, feedback analysis, task progress and pending
    evaluations into the single object dashboards and reports read.

    Only the intern lookup can fail the call. Every later section falls back
    to an empty default and the failure is logged.
    """

    def __init__(
        self,
        github_service: GitHubMetricsService,
        nlp_summary_service: NlpSummaryService,
        task_service: Optional[TaskCompletionService] = None,
    ):
        self.github_service = github_service
        self.nlp_summary_service = nlp_summary_service
        self.task_service = task_service or TaskCompletionService()

    async def _run_step(
        self,
        db: AsyncSession,
        name: str,
        intern_id: str,
        step: Callable[[], Awaitable[T]],
        default: Callable[[], T],
    ) -> SourceResult[T]:
        try:
            return SourceResult(SourceState.AVAILABLE, await step())
        except Exception as e:
            logger.error(f"⚠️ {name} insights failed for intern {intern_id}: {e}")
            # Leave the session usable for the remaining steps
            await db.rollback()
            return SourceResult(SourceState.ERROR, default(), error=str(e))

    async def _github_section(self, db: AsyncSession, intern_id: str) -> Dict[str, Any]:
        records = await self.github_service.fetch_contributions(db, intern_id)
        totals = self.github_service.summarize(records)
        return {
            "totalCommits": totals["totalCommits"],
            "totalAdditions": totals["totalAdditions"],
            "totalDeletions": totals["totalDeletions"],
            "repos": [self.github_service.describe_repo(record) for record in records],
        }

    async def _nlp_section(self, db: AsyncSession, intern_id: str) -> Dict[str, Any]:
        summary = await self.nlp_summary_service.generate_and_store_summary(db, intern_id)
        return dict(summary.summary_json or unavailable_nlp_summary())

    async def _tasks_section(self, db: AsyncSession, intern_id: str) -> Dict[str, Any]:
        snapshot = await self.task_service.completion_rate(db, intern_id)
        return snapshot.as_dict()

    async def count_pending_evaluations(self, db: AsyncSession, intern_id: str) -> int:
        result = await db.execute(
            select(func.count(Evaluation.evaluation_id))
            .where(
                Evaluation.intern_id == intern_id,
                Evaluation.submitted.is_(False)
            )
        )
        return int(result.scalar() or 0)

    async def _require_intern(self, db: AsyncSession, intern_id: str) -> Optional[str]:
        """Validate the intern and return its GitHub username as a plain value."""
        intern = await db.get(User, intern_id)
        if not intern:
            raise NotFoundError(f"Intern '{intern_id}' not found", extra={"intern_id": intern_id})
        return (intern.github_username or "").strip() or None

    async def get_insights(self, db: AsyncSession, intern_id: str) -> Dict[str, Any]:
        github_username = await self._require_intern(db, intern_id)

        if github_username:
            github = await self._run_step(
                db, "GitHub", intern_id,
                lambda: self._github_section(db, intern_id),
                empty_github_summary,
            )
        else:
            logger.info(f"Intern {intern_id} has no GitHub username, skipping GitHub metrics")
            github = SourceResult(SourceState.UNAVAILABLE, empty_github_summary())

        nlp = await self._run_step(
            db, "NLP", intern_id,
            lambda: self._nlp_section(db, intern_id),
            unavailable_nlp_summary,
        )
        tasks = await self._run_step(
            db, "Task", intern_id,
            lambda: self._tasks_section(db, intern_id),
            lambda: TaskCompletion().as_dict(),
        )
        evaluations_due = await self._run_step(
            db, "Evaluation", intern_id,
            lambda: self.count_pending_evaluations(db, intern_id),
            lambda: 0,
        )

        logger.info(
            f"📊 Insights for intern {intern_id}: github={github.state.value}, nlp={nlp.state.value}, "
            f"tasks={tasks.state.value}, evaluations={evaluations_due.state.value}"
        )
        return {
            "github": github.value,
            "nlp": nlp.value,
            "tasks": tasks.value,
            "evaluationsDue": evaluations_due.value,
        }

    async def get_nlp_report(self, db: AsyncSession, intern_id: str) -> Dict[str, Any]:
        """Only the feedback analysis part of the insights object."""
        await self._require_intern(db, intern_id)
        nlp = await self._run_step(
            db, "NLP", intern_id,
            lambda: self._nlp_section(db, intern_id),
            unavailable_nlp_summary,
        )
        return nlp.value
