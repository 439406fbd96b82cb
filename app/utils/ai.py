# app/utils/ai.py
"""
AI utility for connecting with an OpenAI-compatible chat completion API.
Used for generating quiz questions.

Provider failures never raise out of this module: every call returns a
GenerationOutcome and the caller decides what to do with an error.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI
from pydantic import ValidationError

from app.core.config import settings
from app.schemas.ai import GeneratedQuestion
from app.utils.prompts import QUIZ_SYSTEM_MESSAGE, get_quiz_prompt

logger = logging.getLogger(__name__)


@dataclass
class GenerationOutcome:
    questions: List[GeneratedQuestion] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, questions: List[GeneratedQuestion]) -> "GenerationOutcome":
        return cls(questions=questions)

    @classmethod
    def failure(cls, error: str) -> "GenerationOutcome":
        return cls(error=error)


def extract_json_from_response(text: str) -> Any:
    """
    Extract and parse JSON from an AI response that may contain markdown formatting

    Raises:
        ValueError: If no JSON can be parsed
    """
    # Matches ```json\n{...}\n``` or ```\n{...}\n```
    json_pattern = r"```(?:json)?\s*\n?([\s\S]*?)\n?```"
    match = re.search(json_pattern, text)
    json_text = match.group(1).strip() if match else text.strip()

    try:
        return json.loads(json_text)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse JSON from AI response: {str(e)}")
        logger.error(f"Response length: {len(text)} characters")
        raise ValueError(f"Failed to parse AI response as JSON: {str(e)}")


def parse_questions(data: Any) -> List[GeneratedQuestion]:
    """
    Accept either a bare list of questions or {"questions": [...]}.

    Raises:
        ValueError: If the payload does not describe valid questions
    """
    if isinstance(data, dict):
        data = data.get("questions")
    if not isinstance(data, list) or not data:
        raise ValueError("AI response is not a list of questions")

    questions = []
    for index, item in enumerate(data, start=1):
        try:
            question = GeneratedQuestion.model_validate(item)
        except ValidationError as e:
            raise ValueError(f"Question {index} is malformed: {e}")
        if question.correct_answer not in question.options:
            raise ValueError(f"Question {index} has an answer that is not an option")
        questions.append(question)
    return questions


class AIService:
    """Service to interact with the configured AI provider"""

    def __init__(self):
        self.api_key = settings.ai_api_key
        self.api_endpoint = settings.ai_api_endpoint
        self.model = settings.ai_model

        self.client = AsyncOpenAI(
            api_key=self.api_key or "not-configured",
            base_url=(
                self.api_endpoint.replace("/chat/completions", "")
                if self.api_endpoint
                else None
            ),
            timeout=settings.ai_timeout_seconds,
            max_retries=settings.ai_max_retries,
        )

        if not self.is_configured():
            logger.warning(
                "AI_API_KEY / AI_API_ENDPOINT / AI_MODEL not configured. "
                "Quiz generation will use demo questions."
            )

    async def close(self):
        """Close the OpenAI client and release resources"""
        await self.client.close()

    def is_configured(self) -> bool:
        """Check if AI service is properly configured"""
        return bool(self.api_key and self.api_endpoint and self.model)

    async def _complete(self, messages: List[Dict[str, str]]) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=0.7,
        )
        content = response.choices[0].message.content
        return content.strip() if content else ""

    async def generate_quiz_questions(
        self, topic: str, difficulty: str, count: int
    ) -> GenerationOutcome:
        """
        Ask the provider for ``count`` multiple choice questions.

        Returns:
            GenerationOutcome holding either the questions or an error message
        """
        if not self.is_configured():
            return GenerationOutcome.failure("AI service is not configured")

        messages = [
            {"role": "system", "content": QUIZ_SYSTEM_MESSAGE},
            {"role": "user", "content": get_quiz_prompt(topic, difficulty, count)},
        ]

        try:
            logger.info(
                f"Requesting {count} questions about '{topic}' from {self.model}"
            )
            text = await self._complete(messages)
            questions = parse_questions(extract_json_from_response(text))
        except ValueError as e:
            logger.error(f"AI response rejected: {e}")
            return GenerationOutcome.failure(str(e))
        except Exception as e:
            logger.error(f"AI API request error: {e}")
            return GenerationOutcome.failure(f"Failed to connect to AI service: {e}")

        return GenerationOutcome.success(questions[:count])


# Global instance
ai_service = AIService()
