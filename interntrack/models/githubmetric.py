"""Cached GitHub commit metrics per intern and repository."""

import uuid
from sqlalchemy import Column, String, Integer, DateTime, JSON, ForeignKey, Index
from sqlalchemy.orm import relationship
from interntrack.models.base import Base, TimestampMixin, utcnow


class GitHubMetric(Base, TimestampMixin):
    """
    One fetch of commit activity for (intern, repository).

    Rows are append-only: a stale row is superseded by a newer one, never
    overwritten.
    """

    __tablename__ = "github_metrics"
    __table_args__ = (
        Index("ix_github_metrics_intern_repo_fetch", "intern_id", "repo_name", "fetch_date"),
    )
    metric_id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    intern_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    github_username = Column(String, nullable=False)
    repo_name = Column(String, nullable=False)
    fetch_date = Column(DateTime, nullable=False, default=utcnow)
    commits = Column(Integer, default=0, nullable=False)
    additions = Column(Integer, default=0, nullable=False)
    deletions = Column(Integer, default=0, nullable=False)
    raw_contributions = Column(JSON, nullable=True)
    intern = relationship("User", back_populates="github_metrics")
