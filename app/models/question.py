from sqlalchemy import JSON, Column, ForeignKey, Integer, String, Text

from app.core.database import Base


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(
        Integer,
        ForeignKey("quizzes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    question_text = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)  # ["option a", "option b", ...]
    correct_answer = Column(String(255), nullable=False)  # Text of the right option

    def __repr__(self):
        return f"<Question(id={self.id}, quiz_id={self.quiz_id})>"
