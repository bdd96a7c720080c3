"""Pydantic schemas for request and response validation.

This package contains all Pydantic models exchanged over the HTTP API.
"""

from formly.schemas.form import (
    QuestionType,
    QuestionIn,
    FormCreate,
    FormUpdate,
    QuestionOut,
    AnswerOut,
    ResponseOut,
    FormOut,
    FormSummaryOut,
    FormDetailOut,
    AnswerIn,
    SubmissionIn,
    ChartSlice,
    ChartSummary,
    ResponseSummaryOut,
)
from formly.schemas.auth import (
    SignInRequest,
    SignUpRequest,
    ProfileUpdate,
    PasswordChange,
    UserOut,
    SignInResponse,
    SuccessResponse,
)

__all__ = [
    "QuestionType",
    "QuestionIn",
    "FormCreate",
    "FormUpdate",
    "QuestionOut",
    "AnswerOut",
    "ResponseOut",
    "FormOut",
    "FormSummaryOut",
    "FormDetailOut",
    "AnswerIn",
    "SubmissionIn",
    "ChartSlice",
    "ChartSummary",
    "ResponseSummaryOut",
    "SignInRequest",
    "SignUpRequest",
    "ProfileUpdate",
    "PasswordChange",
    "UserOut",
    "SignInResponse",
    "SuccessResponse",
]
