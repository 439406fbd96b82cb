# app/models/relations.py

from sqlalchemy.orm import relationship

from .question import Question
from .quiz import Quiz
from .result import Result
from .user import User


def setup_relationships():
    """
    Configure all SQLAlchemy relationships between models.
    """

    # Quiz to Questions (One-to-Many)
    Quiz.questions = relationship(
        "Question",
        back_populates="quiz",
        cascade="all, delete-orphan",
        order_by="Question.id",
    )
    Question.quiz = relationship("Quiz", back_populates="questions")

    # Quiz to Results (One-to-Many)
    Quiz.results = relationship(
        "Result",
        back_populates="quiz",
        cascade="all, delete-orphan",
    )
    Result.quiz = relationship("Quiz", back_populates="results")

    # User to Results (One-to-Many)
    User.results = relationship("Result", back_populates="user")
    Result.user = relationship("User", back_populates="results")

    # User to authored Quizzes (One-to-Many)
    User.quizzes = relationship("Quiz", back_populates="creator")
    Quiz.creator = relationship("User", back_populates="quizzes")
