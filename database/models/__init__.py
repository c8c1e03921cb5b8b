"""ORM models. Importing this package registers every table on Base.metadata."""

from database.models.admins import Admin
from database.models.positions import Position
from database.models.jobs import Job, Question, QuestionOption, QuestionType
from database.models.applications import Application, Answer

__all__ = [
    "Admin",
    "Position",
    "Job",
    "Question",
    "QuestionOption",
    "QuestionType",
    "Application",
    "Answer",
]
