# app/routers/ai.py
"""
AI-powered quiz generation endpoints
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.models.user import User
from app.schemas.ai import AIQuizRequest, AIQuizResponse
from app.services.ai_quiz import AIQuizService
from app.utils.ai import ai_service

router = APIRouter(prefix="/ai", tags=["AI"])


@router.post(
    "/generate", response_model=AIQuizResponse, status_code=status.HTTP_201_CREATED
)
async def generate_quiz(
    request: AIQuizRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    """
    Generate a multiple choice quiz for a topic.

    Args:
        request: topic, difficulty, question_count (1-20) and optional title
        current_user: Authenticated user

    Returns:
        The stored quiz id and how it was produced. When the AI provider is not
        configured or fails, template questions are used and `demo_mode` is set.
        Quizzes created by non-admins wait for approval.
    """
    return await AIQuizService(db, ai_service).generate_quiz(request, current_user)
