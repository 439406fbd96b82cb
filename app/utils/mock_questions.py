"""
Offline question generator used when the AI provider is unavailable.

Questions are built from generic templates plus a few topic-specific ones.
The first option of every template is the correct one; options are shuffled
before they are returned.
"""

import random
from typing import List, Optional

from app.schemas.ai import GeneratedQuestion

BASE_TEMPLATES = [
    # Easy
    {
        "question": "What is the basic definition of {topic}?",
        "options": [
            "A fundamental concept in {topic}",
            "The core principle of {topic}",
            "The main purpose of {topic}",
            "A basic element of {topic}",
        ],
    },
    {
        "question": "Which of these is a key component of {topic}?",
        "options": [
            "Primary element of {topic}",
            "Secondary feature",
            "Optional component",
            "Unrelated concept",
        ],
    },
    # Medium
    {
        "question": "How does {topic} typically function in practice?",
        "options": [
            "Through systematic processes",
            "By random chance",
            "Without any structure",
            "In isolated instances only",
        ],
    },
    {
        "question": "What is the relationship between {topic} and its applications?",
        "options": [
            "{topic} provides foundation for applications",
            "Applications define {topic}",
            "No relationship exists",
            "{topic} is unrelated to practical use",
        ],
    },
    # Hard
    {
        "question": "What complex problem in {topic} remains challenging to solve?",
        "options": [
            "Advanced theoretical limitations",
            "Basic conceptual understanding",
            "Simple definitions",
            "Elementary principles",
        ],
    },
    {
        "question": "How does {topic} integrate with emerging technologies?",
        "options": [
            "Through adaptive frameworks",
            "By remaining static",
            "Without any integration",
            "Through complete replacement",
        ],
    },
]

TOPIC_TEMPLATES = {
    ("programming", "code"): [
        {
            "question": "Which programming concept is essential for {topic}?",
            "options": [
                "Algorithm design",
                "Color theory",
                "Musical composition",
                "Culinary arts",
            ],
        },
        {
            "question": "What is a common challenge in {topic} development?",
            "options": [
                "Debugging complex logic",
                "Choosing font colors",
                "Selecting music tracks",
                "Planning meals",
            ],
        },
    ],
    ("science",): [
        {
            "question": "What scientific method is crucial for {topic}?",
            "options": [
                "Experimental validation",
                "Artistic expression",
                "Musical harmony",
                "Culinary taste",
            ],
        },
    ],
    ("history",): [
        {
            "question": "Which historical period is most relevant to {topic}?",
            "options": [
                "Key developmental era",
                "Recent entertainment trends",
                "Future predictions",
                "Mythological stories",
            ],
        },
    ],
}


def get_templates(topic: str) -> List[dict]:
    lower_topic = topic.lower()
    templates = list(BASE_TEMPLATES)
    for keywords, extra in TOPIC_TEMPLATES.items():
        if any(keyword in lower_topic for keyword in keywords):
            templates.extend(extra)
            break
    return templates


def fill_template(template: dict, topic: str, rng: random.Random) -> GeneratedQuestion:
    options = [option.replace("{topic}", topic) for option in template["options"]]
    correct_answer = options[0]
    rng.shuffle(options)
    return GeneratedQuestion(
        question=template["question"].replace("{topic}", topic),
        options=options,
        correct_answer=correct_answer,
    )


def generate_mock_questions(
    topic: str, difficulty: str, count: int, seed: Optional[int] = None
) -> List[GeneratedQuestion]:
    """Build ``count`` template questions about ``topic``."""
    rng = random.Random(seed)
    templates = get_templates(topic)
    return [fill_template(rng.choice(templates), topic, rng) for _ in range(count)]
