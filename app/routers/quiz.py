from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_admin, get_current_user
from app.models.user import User
from app.schemas.quiz import (
    QuestionResponse,
    QuizCreate,
    QuizCreatedResponse,
    QuizListResponse,
    QuizQuestionsResponse,
    QuizResponse,
    QuizStatusUpdate,
    QuizSubmission,
    QuizSubmissionResponse,
)
from app.services.quiz import QuizService

router = APIRouter(prefix="/quiz", tags=["quiz"])


@router.post(
    "", response_model=QuizCreatedResponse, status_code=status.HTTP_201_CREATED
)
def create_quiz(
    quiz_in: QuizCreate,
    current_admin: Annotated[User, Depends(get_current_admin)],
    db: Session = Depends(get_db),
):
    """Create a published manual quiz (admin only)."""
    quiz = QuizService(db).create_manual_quiz(quiz_in, current_admin.id)
    return QuizCreatedResponse(
        message="Quiz created successfully",
        quiz_id=quiz.id,
        questions_count=len(quiz_in.questions),
    )


@router.get("/public", response_model=QuizListResponse)
def list_public_quizzes(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    quizzes = QuizService(db).get_public_quizzes()
    return QuizListResponse(
        quizzes=[QuizResponse.model_validate(q) for q in quizzes]
    )


@router.get("/mine", response_model=QuizListResponse)
def list_my_quizzes(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    quizzes = QuizService(db).get_user_quizzes(current_user.id)
    return QuizListResponse(
        quizzes=[QuizResponse.model_validate(q) for q in quizzes]
    )


@router.get("/pending", response_model=QuizListResponse)
def list_pending_quizzes(
    current_admin: Annotated[User, Depends(get_current_admin)],
    db: Session = Depends(get_db),
):
    """Quizzes waiting for approval (admin only)."""
    quizzes = QuizService(db).get_pending_quizzes()
    return QuizListResponse(
        quizzes=[QuizResponse.model_validate(q) for q in quizzes]
    )


@router.get("/{quiz_id}/questions", response_model=QuizQuestionsResponse)
def get_quiz_questions(
    quiz_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    quiz = QuizService(db).get_quiz(quiz_id)
    return QuizQuestionsResponse(
        quiz=QuizResponse.model_validate(quiz),
        questions=[QuestionResponse.model_validate(q) for q in quiz.questions],
    )


@router.post("/submit", response_model=QuizSubmissionResponse)
def submit_quiz(
    submission: QuizSubmission,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    """
    Score a submission and store the result.

    A second submission of the same quiz inside the duplicate window is
    rejected with 429 and `duplicate_prevention: true`.
    """
    return QuizService(db).submit_quiz(submission, current_user.id)


@router.patch("/{quiz_id}/status", response_model=QuizResponse)
def update_quiz_status(
    quiz_id: int,
    update: QuizStatusUpdate,
    current_admin: Annotated[User, Depends(get_current_admin)],
    db: Session = Depends(get_db),
):
    quiz = QuizService(db).update_status(quiz_id, update.status)
    return QuizResponse.model_validate(quiz)


@router.delete("/{quiz_id}")
def delete_quiz(
    quiz_id: int,
    current_admin: Annotated[User, Depends(get_current_admin)],
    db: Session = Depends(get_db),
):
    QuizService(db).delete_quiz(quiz_id)
    return {"success": True, "message": "Quiz deleted successfully"}
