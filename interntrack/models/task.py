"""Tasks model for milestones of InternTrack projects."""

import uuid
from sqlalchemy import Column, Text, String, DateTime, Enum as SQLEnum, ForeignKey
from sqlalchemy.orm import relationship
from interntrack.constants.constants import TaskStatus
from interntrack.models.base import Base, TimestampMixin


class Task(Base, TimestampMixin):
    """Model representing tasks under a milestone."""

    __tablename__ = "tasks"
    task_id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    milestone_id = Column(String, ForeignKey("milestones.milestone_id", ondelete="CASCADE"), nullable=False, index=True)
    assignee_id = Column(String, ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(SQLEnum(TaskStatus), nullable=False, default=TaskStatus.todo)
    due_date = Column(DateTime, nullable=True)
    milestone = relationship("Milestone", back_populates="tasks")
    assignee = relationship("User", foreign_keys=[assignee_id])
