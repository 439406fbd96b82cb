from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from app.core.database import Base


class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)

    title = Column(String(255), nullable=False)
    topic = Column(String(100), nullable=False, index=True)
    difficulty = Column(String(20), default="medium", nullable=False)
    source = Column(String(20), default="manual", nullable=False)  # manual, AI
    status = Column(
        String(20), default="pending", nullable=False, index=True
    )  # pending, published, rejected
    is_public = Column(Boolean, default=False, nullable=False)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<Quiz(id={self.id}, title='{self.title}', status='{self.status}')>"

    @property
    def creator_name(self):
        return self.creator.name if self.creator else None
