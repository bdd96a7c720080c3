"""Database models and session management.

This package contains all SQLAlchemy ORM models and database utilities.
"""

from formly.models.database import Base, engine, SessionLocal, get_db
from formly.models.user import User
from formly.models.form import Form, Question
from formly.models.response import FormResponse, Answer

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "get_db",
    "User",
    "Form",
    "Question",
    "FormResponse",
    "Answer",
]
