from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.quiz import Difficulty


class GeneratedQuestion(BaseModel):
    question: str
    options: List[str] = Field(..., min_length=2)
    correct_answer: str

    @field_validator("correct_answer")
    @classmethod
    def strip_answer(cls, value: str) -> str:
        return value.strip()


class AIQuizRequest(BaseModel):
    topic: str = Field(..., min_length=1, max_length=100)
    difficulty: Difficulty = "medium"
    question_count: int = Field(5, ge=1, le=20)
    title: Optional[str] = Field(None, max_length=255)


class AIQuizResponse(BaseModel):
    message: str
    quiz_id: int
    questions_count: int
    status: str
    requires_approval: bool
    ai_used: bool
    demo_mode: bool
    fallback: bool = False
