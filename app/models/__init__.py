"""
Models package initialization
Import all models and setup relationships
"""

from .question import Question
from .quiz import Quiz

# Import and setup relationships
from .relations import setup_relationships
from .result import Result
from .user import User

# Setup all relationships after models are imported
setup_relationships()

# Make models available at package level
__all__ = [
    "Question",
    "Quiz",
    "Result",
    "User",
]
