"""Pydantic schemas for forms, questions and responses.

Request bodies and response payloads of the form endpoints. JSON field
names are camelCase on the wire and snake_case in Python.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Length of the forms.title column
MAX_TITLE_LENGTH = 255


class QuestionType(str, Enum):
    """Valid question types."""
    TEXT = "text"
    MULTIPLE_CHOICE = "multipleChoice"
    CHECKBOX = "checkbox"
    DROPDOWN = "dropdown"

    @property
    def has_options(self) -> bool:
        """Whether questions of this type carry a list of options."""
        return _HAS_OPTIONS[self]


# Every member must be listed; looked up by QuestionType.has_options
_HAS_OPTIONS = {
    QuestionType.TEXT: False,
    QuestionType.MULTIPLE_CHOICE: True,
    QuestionType.CHECKBOX: True,
    QuestionType.DROPDOWN: True,
}


class CamelModel(BaseModel):
    """Base model serialising to camelCase and readable from ORM objects."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class QuestionIn(CamelModel):
    """A question as sent by the editor.

    Attributes:
        id: Id of an existing question being kept, if any
        text: Question text
        type: Question type
        required: Whether respondents must answer
        options: Choices for option-bearing types
    """
    id: Optional[str] = Field(None, description="Existing question id to keep")
    text: str = Field("", description="Question text")
    type: QuestionType = Field(QuestionType.TEXT, description="Question type")
    required: bool = Field(False, description="Whether an answer is required")
    options: Optional[list[str]] = Field(None, description="Choices for option-bearing types")


class FormCreate(CamelModel):
    """Body of POST /api/forms."""
    title: str = Field("", description="Form title")
    description: Optional[str] = Field(None, description="Optional description")
    questions: list[QuestionIn] = Field(default_factory=list)


class FormUpdate(FormCreate):
    """Body of PUT /api/forms/{id}."""
    published: bool = Field(..., description="Whether the form accepts responses")


class QuestionOut(CamelModel):
    id: str
    text: str
    type: QuestionType
    required: bool
    options: Optional[list[str]] = None


class AnswerOut(CamelModel):
    id: str
    value: str
    question_id: str


class ResponseOut(CamelModel):
    id: str
    form_id: str
    created_at: datetime
    answers: list[AnswerOut] = Field(default_factory=list)


class FormOut(CamelModel):
    """A form as any permitted reader sees it."""
    id: str
    title: str
    description: Optional[str] = None
    published: bool
    created_at: datetime
    updated_at: datetime
    questions: list[QuestionOut] = Field(default_factory=list)


class FormSummaryOut(FormOut):
    """Entry of the owner's form list."""
    response_count: int = 0


class FormDetailOut(FormOut):
    """A form with its collected responses, shown to the owner."""
    response_count: int = 0
    responses: list[ResponseOut] = Field(default_factory=list)


class AnswerIn(CamelModel):
    question_id: str = Field(..., min_length=1, description="Question being answered")
    value: str = Field(..., description="Answer text; checkbox values are comma-joined")


class SubmissionIn(CamelModel):
    """Body of POST /api/forms/{id}/responses."""
    answers: list[AnswerIn] = Field(default_factory=list)


class ChartSlice(CamelModel):
    name: str
    value: int


class ChartSummary(CamelModel):
    """Answer distribution of one option-bearing question."""
    question_id: str
    text: str
    option_count: int
    response_count: int
    distribution: list[ChartSlice] = Field(default_factory=list)


class ResponseSummaryOut(CamelModel):
    """Table projection and charts for a form's responses."""
    columns: list[str]
    rows: list[list[str]]
    charts: list[ChartSummary] = Field(default_factory=list)
