import logging

from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.ai import AIQuizRequest, AIQuizResponse
from app.schemas.quiz import QuestionCreate
from app.services.quiz import QuizService
from app.utils.ai import AIService
from app.utils.mock_questions import generate_mock_questions

logger = logging.getLogger(__name__)


class AIQuizService:
    def __init__(self, db: Session, ai: AIService):
        self.db = db
        self.ai = ai
        self.quiz_service = QuizService(db)

    async def generate_quiz(self, request: AIQuizRequest, user: User) -> AIQuizResponse:
        """
        Generate a quiz with the AI provider, falling back to template
        questions when the provider is unconfigured or fails.
        """
        ai_configured = self.ai.is_configured()
        outcome = await self.ai.generate_quiz_questions(
            request.topic, request.difficulty, request.question_count
        )

        if outcome.ok:
            questions = outcome.questions
        else:
            logger.warning(
                f"Using demo questions for '{request.topic}': {outcome.error}"
            )
            questions = generate_mock_questions(
                request.topic, request.difficulty, request.question_count
            )

        ai_used = outcome.ok
        fallback = ai_configured and not ai_used
        status = "published" if user.is_admin else "pending"

        quiz = self.quiz_service.create_quiz(
            title=request.title or f"AI Quiz: {request.topic}",
            topic=request.topic,
            difficulty=request.difficulty,
            questions=[
                QuestionCreate(
                    question_text=q.question,
                    options=q.options,
                    correct_answer=q.correct_answer,
                )
                for q in questions
            ],
            created_by=user.id,
            source="AI",
            status=status,
        )

        if user.is_admin:
            message = "AI quiz generated successfully and published!"
        else:
            message = "AI quiz generated successfully and sent for admin approval"
        if fallback:
            message += " (demo mode - AI service unavailable)"
        elif not ai_used:
            message += " (demo mode - configure the AI provider for real questions)"

        return AIQuizResponse(
            message=message,
            quiz_id=quiz.id,
            questions_count=len(questions),
            status=status,
            requires_approval=not user.is_admin,
            ai_used=ai_used,
            demo_mode=not ai_used,
            fallback=fallback,
        )
