"""Evaluation model: mentor and self reviews carrying free-text feedback."""

import uuid
from sqlalchemy import Column, String, Text, Integer, Boolean, Enum, ForeignKey
from sqlalchemy.orm import relationship
from interntrack.constants.constants import EvaluationType
from interntrack.models.base import Base, TimestampMixin


class Evaluation(Base, TimestampMixin):
    """Model representing an evaluation of an intern."""

    __tablename__ = "evaluations"
    evaluation_id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    intern_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    mentor_id = Column(String, ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)
    type = Column(Enum(EvaluationType), nullable=False, default=EvaluationType.weekly)
    score = Column(Integer, nullable=False, default=0)
    feedback_text = Column(Text, nullable=False, default="")
    submitted = Column(Boolean, default=False, nullable=False)
    intern = relationship("User", foreign_keys=[intern_id], back_populates="received_evaluations")
    mentor = relationship("User", foreign_keys=[mentor_id], back_populates="given_evaluations")
