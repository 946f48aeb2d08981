import logging
from typing import Any, Dict

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from interntrack.constants.constants import ProjectStatus, UserRole
from interntrack.models.evaluation import Evaluation
from interntrack.models.project import Project
from interntrack.models.user import User

logger = logging.getLogger(__name__)

ACTIVE_PROJECT_STATUSES = (ProjectStatus.active, ProjectStatus.in_progress)


class AnalyticsService:
    """Platform wide counters for the HR dashboard."""

    async def _count(self, db: AsyncSession, stmt) -> int:
        result = await db.execute(stmt)
        return int(result.scalar() or 0)

    async def get_dashboard_summary(self, db: AsyncSession) -> Dict[str, Any]:
        total_interns = await self._count(
            db,
            select(func.count(User.user_id)).where(User.role == UserRole.intern, User.is_active.is_(True))
        )
        total_mentors = await self._count(
            db,
            select(func.count(User.user_id)).where(User.role == UserRole.mentor, User.is_active.is_(True))
        )
        active_projects = await self._count(
            db,
            select(func.count(Project.project_id)).where(Project.status.in_(ACTIVE_PROJECT_STATUSES))
        )
        pending_evaluations = await self._count(
            db,
            select(func.count(Evaluation.evaluation_id)).where(Evaluation.submitted.is_(False))
        )

        logger.info(
            f"📈 Dashboard summary: {total_interns} interns, {total_mentors} mentors, "
            f"{active_projects} active projects, {pending_evaluations} pending evaluations"
        )
        return {
            "totalInterns": total_interns,
            "totalMentors": total_mentors,
            "activeProjects": active_projects,
            "pendingEvaluations": pending_evaluations,
        }
