"""
Prompt templates for AI quiz generation
"""

QUIZ_SYSTEM_MESSAGE = """You are an educational assessment designer.
You write accurate, unambiguous multiple choice questions and you answer with JSON only."""

DIFFICULTY_GUIDES = {
    "easy": "EASY: basic facts and definitions",
    "medium": "MEDIUM: application and understanding of concepts",
    "hard": "HARD: analysis, synthesis, or complex concepts",
}


def get_difficulty_guide(difficulty: str) -> str:
    return DIFFICULTY_GUIDES.get(difficulty, DIFFICULTY_GUIDES["medium"])


def get_quiz_prompt(topic: str, difficulty: str, count: int) -> str:
    return f"""Generate exactly {count} multiple choice questions about {topic} with {difficulty} difficulty.

DIFFICULTY:
{get_difficulty_guide(difficulty)}

REQUIREMENTS:
✓ Provide exactly 4 options per question
✓ Options must be plausible but distinct
✓ Only ONE option is correct and it must be factually accurate
✓ Vary the position of the correct answer

OUTPUT FORMAT (JSON ONLY, no additional text):
{{
    "questions": [
        {{
            "question": "Which planet is known as the Red Planet?",
            "options": ["Venus", "Mars", "Jupiter", "Saturn"],
            "correct_answer": "Mars"
        }}
    ]
}}

"correct_answer" must be the exact text of one of the options.
Now generate {count} questions about {topic} at {difficulty} level."""
