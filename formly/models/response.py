"""FormResponse and Answer models for submitted responses.

A response is one visitor's submission of a published form. It is created
together with its answers in a single transaction and never modified.
"""

from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formly.models.database import Base, new_id, utcnow


class FormResponse(Base):
    """Model for one submission of a form.

    Attributes:
        id: Primary key (UUID string)
        form_id: Foreign key to forms table
        created_at: When the response was submitted
        form: Relationship to the parent Form
        answers: Answers given in this submission
    """

    __tablename__ = "responses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    form_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("forms.id", ondelete="CASCADE"),
        nullable=False,
        comment="Foreign key to forms table"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        comment="When the response was submitted"
    )

    form: Mapped["Form"] = relationship("Form", back_populates="responses")

    answers: Mapped[list["Answer"]] = relationship(
        "Answer",
        back_populates="response",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_responses_form_created", "form_id", "created_at"),
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<FormResponse(id={self.id}, "
            f"form_id={self.form_id}, "
            f"answers={len(self.answers)})>"
        )


class Answer(Base):
    """Model for one answer within a response.

    The question reference is kept without a foreign key so that replacing
    a form's questions never deletes recorded answers; answers to removed
    questions simply stop matching.

    Attributes:
        id: Primary key (UUID string)
        response_id: Foreign key to responses table
        question_id: Id of the answered question
        value: Answer text; checkbox selections are comma-joined
    """

    __tablename__ = "answers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    response_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("responses.id", ondelete="CASCADE"),
        nullable=False,
        comment="Foreign key to responses table"
    )
    question_id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        index=True,
        comment="Answered question id (no foreign key)"
    )
    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Answer text"
    )

    response: Mapped["FormResponse"] = relationship(
        "FormResponse",
        back_populates="answers",
    )

    __table_args__ = (
        UniqueConstraint("response_id", "question_id", name="uq_answers_response_question"),
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<Answer(id={self.id}, "
            f"response_id={self.response_id}, "
            f"question_id={self.question_id})>"
        )
