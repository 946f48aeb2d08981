"""User model for the InternTrack platform."""

import uuid
from sqlalchemy import Column, String, Boolean, Enum
from sqlalchemy.orm import relationship

from interntrack.constants.constants import UserRole
from interntrack.models.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"
    user_id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.intern)
    # Set after onboarding; mentors and HR usually have none
    github_username = Column(String, nullable=True, index=True)
    is_active = Column(Boolean, default=True)

    # Relationships
    received_evaluations = relationship(
        "Evaluation",
        back_populates="intern",
        foreign_keys="[Evaluation.intern_id]",
        cascade="all, delete-orphan",
        passive_deletes=True
    )
    given_evaluations = relationship(
        "Evaluation",
        back_populates="mentor",
        foreign_keys="[Evaluation.mentor_id]"
    )
    assigned_projects = relationship("Project", back_populates="intern", foreign_keys="[Project.intern_id]")
    mentored_projects = relationship("Project", back_populates="mentor", foreign_keys="[Project.mentor_id]")
    projects_as_intern = relationship("Project", secondary="project_interns", back_populates="interns")

    github_metrics = relationship(
        "GitHubMetric",
        back_populates="intern",
        cascade="all, delete-orphan",
        passive_deletes=True
    )
    nlp_summaries = relationship(
        "NlpSummary",
        back_populates="intern",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    @property
    def full_name(self) -> str:
        return " ".join(part for part in [self.first_name, self.last_name] if part) or self.email
