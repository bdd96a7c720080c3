"""Editable in-memory representation of a form.

FormDraft models what an author is editing before saving: title,
description, published flag and an ordered list of questions. Every
operation returns a new draft and leaves the original untouched; nothing
here touches the database.

Saving goes through ``validate()`` and ``to_payload()``. The API runs
incoming create/replace bodies through the same path, so a saved form
always satisfies the draft's validation rules.
"""

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Optional, Tuple

from formly.schemas.form import (
    MAX_TITLE_LENGTH,
    FormCreate,
    FormOut,
    FormUpdate,
    QuestionIn,
    QuestionType,
)

MIN_OPTIONS = 2

# Question fields update_question() may replace
EDITABLE_FIELDS = ("text", "type", "required", "options")


def _fresh_question_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class ValidationResult:
    """Result of draft validation.

    Attributes:
        is_valid: Whether the draft can be saved
        error_message: First problem found, in document order
    """
    is_valid: bool
    error_message: Optional[str] = None


@dataclass(frozen=True)
class QuestionDraft:
    """One question being edited.

    ``options`` is kept even when ``type`` is not option-bearing so that
    switching a question's type back and forth does not lose choices.
    """
    id: str = field(default_factory=_fresh_question_id)
    text: str = ""
    type: QuestionType = QuestionType.TEXT
    required: bool = False
    options: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class FormDraft:
    """A form being edited.

    Example:
        >>> draft = FormDraft.new().add_question()
        >>> len(draft.questions)
        2
    """
    title: str = ""
    description: str = ""
    published: bool = True
    questions: Tuple[QuestionDraft, ...] = ()

    @classmethod
    def new(cls) -> "FormDraft":
        """A blank draft with the single empty question every form starts with."""
        return cls(questions=(QuestionDraft(),))

    @classmethod
    def from_payload(cls, payload: FormCreate) -> "FormDraft":
        """Build a draft from a create/update request body.

        Questions without an id get a fresh one.
        """
        questions = tuple(
            QuestionDraft(
                id=q.id or _fresh_question_id(),
                text=q.text,
                type=q.type,
                required=q.required,
                options=tuple(q.options) if q.options is not None else None,
            )
            for q in payload.questions
        )
        return cls(
            title=payload.title,
            description=payload.description or "",
            published=getattr(payload, "published", True),
            questions=questions,
        )

    @classmethod
    def from_form(cls, form: FormOut) -> "FormDraft":
        """Start editing a saved form."""
        return cls(
            title=form.title,
            description=form.description or "",
            published=form.published,
            questions=tuple(
                QuestionDraft(
                    id=q.id,
                    text=q.text,
                    type=q.type,
                    required=q.required,
                    options=tuple(q.options) if q.options is not None else None,
                )
                for q in form.questions
            ),
        )

    # Form fields

    def set_title(self, title: str) -> "FormDraft":
        return replace(self, title=title)

    def set_description(self, description: str) -> "FormDraft":
        return replace(self, description=description)

    def set_published(self, published: bool) -> "FormDraft":
        return replace(self, published=published)

    # Questions

    def add_question(self) -> "FormDraft":
        """Append an empty, optional text question with a fresh id."""
        return replace(self, questions=self.questions + (QuestionDraft(),))

    def remove_question(self, index: int) -> "FormDraft":
        """Remove a question; does nothing when it is the only one left."""
        if len(self.questions) == 1:
            return self
        questions = list(self.questions)
        del questions[index]
        return replace(self, questions=tuple(questions))

    def update_question(self, index: int, field_name: str, value: Any) -> "FormDraft":
        """Replace one field of a question.

        Changing the type keeps any options already entered; they are
        dropped by to_payload() if the final type has no options.

        Raises:
            ValueError: If field_name is not an editable question field or
                the type value is unknown
            IndexError: If index is out of range
        """
        if field_name not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown question field: {field_name}")
        if field_name == "type":
            value = QuestionType(value)
        elif field_name == "options" and value is not None:
            value = tuple(value)
        elif field_name == "required":
            value = bool(value)

        return self._replace_question(index, **{field_name: value})

    def reorder(self, source_index: int, destination_index: int) -> "FormDraft":
        """Move one question to a new position, shifting the ones between."""
        questions = list(self.questions)
        moved = questions.pop(source_index)
        questions.insert(destination_index, moved)
        return replace(self, questions=tuple(questions))

    # Options

    def add_option(self, question_index: int) -> "FormDraft":
        """Append an empty option to a question."""
        options = self.questions[question_index].options or ()
        return self._replace_question(question_index, options=options + ("",))

    def update_option(self, question_index: int, option_index: int, value: str) -> "FormDraft":
        options = list(self.questions[question_index].options or ())
        options[option_index] = value
        return self._replace_question(question_index, options=tuple(options))

    def remove_option(self, question_index: int, option_index: int) -> "FormDraft":
        """Remove an option; no minimum is enforced while editing."""
        options = list(self.questions[question_index].options or ())
        del options[option_index]
        return self._replace_question(question_index, options=tuple(options))

    def _replace_question(self, index: int, **changes: Any) -> "FormDraft":
        questions = list(self.questions)
        questions[index] = replace(questions[index], **changes)
        return replace(self, questions=tuple(questions))

    # Validation and serialization

    @property
    def is_dirty(self) -> bool:
        """Whether leaving the editor should ask for confirmation.

        True as soon as anything was typed, even if it was later reverted
        to match the saved form.
        """
        return bool(
            self.title
            or self.description
            or any(q.text for q in self.questions)
        )

    def validate(self) -> ValidationResult:
        """Check the draft can be saved.

        Stops at the first problem: title, then each question in order,
        then that question's options in order.
        """
        if not self.title.strip():
            return ValidationResult(False, "Form title is required")
        if len(self.title) > MAX_TITLE_LENGTH:
            return ValidationResult(False, "Form title is too long")

        if not self.questions:
            return ValidationResult(False, "Form must have at least one question")

        for number, question in enumerate(self.questions, start=1):
            if not question.text.strip():
                return ValidationResult(False, f"Question {number} text is required")

            if not question.type.has_options:
                continue

            options = question.options or ()
            if len(options) < MIN_OPTIONS:
                return ValidationResult(
                    False, f"Question {number} needs at least {MIN_OPTIONS} options"
                )
            for option_number, option in enumerate(options, start=1):
                if not option.strip():
                    return ValidationResult(
                        False,
                        f"Option {option_number} in Question {number} cannot be empty",
                    )

        return ValidationResult(True)

    def to_payload(self) -> FormUpdate:
        """Serialize for saving; options are nulled for types without options."""
        return FormUpdate(
            title=self.title,
            description=self.description or None,
            published=self.published,
            questions=[
                QuestionIn(
                    id=q.id,
                    text=q.text,
                    type=q.type,
                    required=q.required,
                    options=list(q.options or ()) if q.type.has_options else None,
                )
                for q in self.questions
            ],
        )
