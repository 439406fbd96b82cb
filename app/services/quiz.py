# app/services/quiz.py
import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.decorator import DuplicateSubmissionError, db_exception
from app.models.question import Question
from app.models.quiz import Quiz
from app.models.result import Result
from app.schemas.quiz import (
    QuestionCreate,
    QuizCreate,
    QuizSubmission,
    QuizSubmissionResponse,
)
from app.utils.dates import get_utc_now, make_aware

logger = logging.getLogger(__name__)


class QuizService:
    def __init__(self, db: Session):
        self.db = db

    # ============================================
    # Authoring
    # ============================================

    @db_exception
    def create_quiz(
        self,
        title: str,
        topic: str,
        difficulty: str,
        questions: List[QuestionCreate],
        created_by: int,
        source: str = "manual",
        status: str = "published",
    ) -> Quiz:
        """Create a quiz and its questions in one transaction."""
        quiz = Quiz(
            title=title,
            topic=topic,
            difficulty=difficulty,
            source=source,
            status=status,
            is_public=status == "published",
            created_by=created_by,
        )
        quiz.questions = [
            Question(
                question_text=q.question_text,
                options=list(q.options),
                correct_answer=q.correct_answer,
            )
            for q in questions
        ]

        self.db.add(quiz)
        self.db.commit()
        self.db.refresh(quiz)

        logger.info(
            f"Quiz created with ID: {quiz.id} ({len(questions)} questions, status={status})"
        )
        return quiz

    def create_manual_quiz(self, quiz_in: QuizCreate, created_by: int) -> Quiz:
        return self.create_quiz(
            title=quiz_in.title,
            topic=quiz_in.topic,
            difficulty=quiz_in.difficulty,
            questions=quiz_in.questions,
            created_by=created_by,
            source="manual",
            status="published",
        )

    # ============================================
    # Listing
    # ============================================

    def _listing_query(self):
        return self.db.query(Quiz).options(joinedload(Quiz.creator))

    def get_public_quizzes(self) -> List[Quiz]:
        return (
            self._listing_query()
            .filter(Quiz.is_public == True, Quiz.status == "published")
            .order_by(Quiz.created_at.desc(), Quiz.id.desc())
            .all()
        )

    def get_user_quizzes(self, user_id: int) -> List[Quiz]:
        return (
            self._listing_query()
            .filter(Quiz.created_by == user_id)
            .order_by(Quiz.created_at.desc(), Quiz.id.desc())
            .all()
        )

    def get_pending_quizzes(self) -> List[Quiz]:
        return (
            self._listing_query()
            .filter(Quiz.status == "pending")
            .order_by(Quiz.created_at.desc(), Quiz.id.desc())
            .all()
        )

    def get_quiz(self, quiz_id: int) -> Quiz:
        quiz = self._listing_query().filter(Quiz.id == quiz_id).first()
        if not quiz:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found"
            )
        return quiz

    # ============================================
    # Taking a quiz
    # ============================================

    def get_latest_result(self, user_id: int, quiz_id: int) -> Optional[Result]:
        return (
            self.db.query(Result)
            .filter(Result.user_id == user_id, Result.quiz_id == quiz_id)
            .order_by(Result.created_at.desc(), Result.id.desc())
            .first()
        )

    def check_duplicate_submission(self, user_id: int, quiz_id: int) -> Optional[Result]:
        """
        Reject a submission when the same user stored a result for the same quiz
        less than DUPLICATE_SUBMISSION_WINDOW_SECONDS ago. Returns the previous
        result (if any) otherwise.
        """
        previous = self.get_latest_result(user_id, quiz_id)
        if previous is None:
            return None

        age = (get_utc_now() - make_aware(previous.created_at)).total_seconds()
        if age < settings.duplicate_submission_window_seconds:
            logger.warning(
                f"Duplicate submission prevented: user {user_id} quiz {quiz_id} "
                f"({age:.0f}s after the previous one)"
            )
            raise DuplicateSubmissionError(last_submission=previous.created_at)

        return previous

    @staticmethod
    def score_answers(questions: List[Question], answers: dict) -> int:
        """Count exact matches between the chosen options and the correct answers."""
        return sum(
            1
            for question in questions
            if answers.get(question.id) == question.correct_answer
        )

    @db_exception
    def submit_quiz(
        self, submission: QuizSubmission, user_id: int
    ) -> QuizSubmissionResponse:
        if not submission.answers:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Quiz ID and answers are required",
            )

        quiz = self.get_quiz(submission.quiz_id)
        previous = self.check_duplicate_submission(user_id, quiz.id)

        questions = list(quiz.questions)
        if not questions:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Quiz has no questions",
            )

        score = self.score_answers(questions, submission.answers)
        total_questions = len(questions)
        logger.info(f"Calculated score: {score}/{total_questions} for user {user_id}")

        result = Result(
            user_id=user_id,
            quiz_id=quiz.id,
            score=score,
            total_questions=total_questions,
            time_taken=submission.time_taken,
        )
        self.db.add(result)
        self.db.commit()
        self.db.refresh(result)

        return QuizSubmissionResponse(
            message="Quiz submitted successfully",
            result_id=result.id,
            score=score,
            total_questions=total_questions,
            percentage=round(score / total_questions * 100, 2),
            first_submission=previous is None,
        )

    # ============================================
    # Moderation
    # ============================================

    @db_exception
    def update_status(self, quiz_id: int, new_status: str) -> Quiz:
        quiz = self.get_quiz(quiz_id)
        quiz.status = new_status
        quiz.is_public = new_status == "published"
        self.db.commit()
        self.db.refresh(quiz)
        logger.info(f"Quiz {quiz_id} status set to {new_status}")
        return quiz

    @db_exception
    def delete_quiz(self, quiz_id: int) -> None:
        quiz = self.get_quiz(quiz_id)
        self.db.delete(quiz)
        self.db.commit()
        logger.info(f"Quiz {quiz_id} deleted")
