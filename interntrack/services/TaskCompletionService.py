import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from interntrack.constants.constants import TaskStatus
from interntrack.models.milestone import Milestone
from interntrack.models.project import Project, project_interns
from interntrack.models.task import Task

logger = logging.getLogger(__name__)


@dataclass
class TaskCompletion:
    total: int = 0
    completed: int = 0
    rate: float = 0.0
    tasks: List[Dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "completed": self.completed,
            "completionRate": self.rate,
            "list": list(self.tasks),
        }


def completion_rate(completed: int, total: int) -> float:
    """Percentage of completed tasks, 0.0 when there are none."""
    if total <= 0:
        return 0.0
    return round(completed / total * 100, 2)


class TaskCompletionService:
    """Task statistics across every project an intern belongs to."""

    async def completion_rate(self, db: AsyncSession, intern_id: str) -> TaskCompletion:
        member_projects = select(project_interns.c.project_id).where(project_interns.c.user_id == intern_id)

        # A project reached through both the primary intern column and the
        # membership table still yields each task once: tasks are selected directly
        result = await db.execute(
            select(Task.task_id, Task.title, Task.status)
            .join(Milestone, Task.milestone_id == Milestone.milestone_id)
            .join(Project, Milestone.project_id == Project.project_id)
            .where(
                or_(
                    Project.intern_id == intern_id,
                    Project.project_id.in_(member_projects)
                )
            )
            .order_by(Task.created_at)
        )
        rows = result.all()

        tasks = [
            {
                "id": task_id,
                "title": title,
                "status": status.value if isinstance(status, TaskStatus) else status,
            }
            for task_id, title, status in rows
        ]
        total = len(tasks)
        completed = sum(1 for t in tasks if t["status"] == TaskStatus.done.value)

        logger.info(f"📋 Intern {intern_id}: {completed}/{total} tasks done")
        return TaskCompletion(
            total=total,
            completed=completed,
            rate=completion_rate(completed, total),
            tasks=tasks,
        )
