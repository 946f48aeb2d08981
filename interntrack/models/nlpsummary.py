"""NLP summary model: latest feedback analysis per intern."""

import uuid
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey
from sqlalchemy.orm import relationship
from interntrack.models.base import Base, TimestampMixin


class NlpSummary(Base, TimestampMixin):
    """
    Stored feedback analysis.

    A null evaluation_id marks the aggregate summary across all of the
    intern's feedback; there is at most one such row per intern.
    """

    __tablename__ = "nlp_summaries"
    summary_id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    intern_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    evaluation_id = Column(String, ForeignKey("evaluations.evaluation_id", ondelete="SET NULL"), nullable=True)
    summary_json = Column(JSON, nullable=True)
    analysis_date = Column(DateTime, nullable=True)
    intern = relationship("User", back_populates="nlp_summaries")
    evaluation = relationship("Evaluation")
