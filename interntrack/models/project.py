"""Project model and the intern membership table."""

import uuid
from sqlalchemy import Column, String, Text, Table, Enum as SQLEnum, ForeignKey
from sqlalchemy.orm import relationship

from interntrack.constants.constants import ProjectStatus
from interntrack.models.base import Base, TimestampMixin


project_interns = Table(
    "project_interns",
    Base.metadata,
    Column("project_id", String, ForeignKey("projects.project_id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True),
)


class Project(Base, TimestampMixin):
    """Model representing an internship project."""

    __tablename__ = "projects"
    project_id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(SQLEnum(ProjectStatus), nullable=False, default=ProjectStatus.planning)
    mentor_id = Column(String, ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)
    # Primary intern; additional interns live in project_interns
    intern_id = Column(String, ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True, index=True)
    mentor = relationship("User", foreign_keys=[mentor_id], back_populates="mentored_projects")
    intern = relationship("User", foreign_keys=[intern_id], back_populates="assigned_projects")
    interns = relationship("User", secondary=project_interns, back_populates="projects_as_intern")
    milestones = relationship("Milestone", back_populates="project", cascade="all, delete-orphan")
