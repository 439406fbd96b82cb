# app/models/result.py
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer
from sqlalchemy.sql import func

from app.core.database import Base


class Result(Base):
    """One recorded quiz attempt."""

    __tablename__ = "results"
    __table_args__ = (
        Index("ix_results_user_quiz_created", "user_id", "quiz_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    quiz_id = Column(
        Integer,
        ForeignKey("quizzes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Attempt data
    score = Column(Integer, nullable=False)  # Correct answers
    total_questions = Column(Integer, nullable=False)
    time_taken = Column(Integer, nullable=False, default=0)  # Seconds

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )

    def __repr__(self):
        return f"<Result(id={self.id}, user_id={self.user_id}, score={self.score}/{self.total_questions})>"
