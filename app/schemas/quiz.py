from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

Difficulty = Literal["easy", "medium", "hard"]
QuizStatus = Literal["pending", "published", "rejected"]


class QuestionCreate(BaseModel):
    question_text: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=2)
    correct_answer: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def correct_answer_is_an_option(self):
        if self.correct_answer not in self.options:
            raise ValueError("correct_answer must be one of the options")
        return self


class QuizCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    topic: str = Field(..., min_length=1, max_length=100)
    difficulty: Difficulty = "medium"
    questions: List[QuestionCreate] = Field(..., min_length=1)


class QuizResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    topic: str
    difficulty: str
    source: str
    status: str
    is_public: bool
    created_by: Optional[int] = None
    creator_name: Optional[str] = None
    created_at: datetime


class QuizListResponse(BaseModel):
    quizzes: List[QuizResponse]


class QuizCreatedResponse(BaseModel):
    message: str
    quiz_id: int
    questions_count: int


class QuestionResponse(BaseModel):
    """Question as shown to a quiz taker (no correct answer)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    quiz_id: int
    question_text: str
    options: List[str]


class QuizQuestionsResponse(BaseModel):
    quiz: QuizResponse
    questions: List[QuestionResponse]


class QuizSubmission(BaseModel):
    quiz_id: int
    answers: Dict[int, str] = Field(..., description="question_id -> chosen option")
    time_taken: int = Field(0, ge=0, description="Seconds spent on the quiz")


class QuizSubmissionResponse(BaseModel):
    message: str
    result_id: int
    score: int
    total_questions: int
    percentage: float
    first_submission: bool


class QuizStatusUpdate(BaseModel):
    status: QuizStatus
