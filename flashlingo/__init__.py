"""
FlashLingo

Vocabulary flashcards and typed-answer quizzes over a personal word list.
"""

from . import db
from . import topics
from . import review
from . import quiz
from . import library

__version__ = "0.1.0"
__all__ = ["db", "topics", "review", "quiz", "library"]
