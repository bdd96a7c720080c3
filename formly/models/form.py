"""Form and Question models.

A form owns an ordered list of questions and the responses collected for
it. Questions are replaced wholesale whenever the form is saved.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formly.models.database import Base, new_id, utcnow
from formly.schemas.form import MAX_TITLE_LENGTH, QuestionType


class Form(Base):
    """Model for a user's form.

    Only the owner may read an unpublished form or change it; a published
    form is readable by anyone and accepts responses.

    Attributes:
        id: Primary key (UUID string)
        title: Form title
        description: Optional description shown above the questions
        published: Whether the form is public and accepts responses
        owner_id: Foreign key to users table
        created_at: When the form was created
        updated_at: Last save
        owner: Relationship to the owning User
        questions: Questions in display order
        responses: Collected responses, newest first
    """

    __tablename__ = "forms"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    title: Mapped[str] = mapped_column(
        String(MAX_TITLE_LENGTH),
        nullable=False,
        comment="Form title"
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Optional form description"
    )
    published: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Public and accepting responses"
    )

    owner_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Foreign key to users table"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    owner: Mapped["User"] = relationship("User", back_populates="forms")

    questions: Mapped[list["Question"]] = relationship(
        "Question",
        back_populates="form",
        order_by="Question.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    responses: Mapped[list["FormResponse"]] = relationship(
        "FormResponse",
        back_populates="form",
        order_by="FormResponse.created_at.desc()",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        # Owner's form list, most recently updated first
        Index("idx_forms_owner_updated", "owner_id", "updated_at"),
    )

    def is_owned_by(self, user_id: Optional[str]) -> bool:
        """Check whether the given user owns this form."""
        return user_id is not None and self.owner_id == user_id

    @property
    def response_count(self) -> int:
        """Number of collected responses (loads the responses)."""
        return len(self.responses)

    def touch(self) -> None:
        """Mark the form as updated now.

        Replacing only the questions does not change any form column, so
        the timestamp has to be bumped explicitly.
        """
        self.updated_at = utcnow()

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<Form(id={self.id}, "
            f"title={self.title!r}, "
            f"published={self.published})>"
        )


class Question(Base):
    """Model for one question of a form.

    Attributes:
        id: Primary key (UUID string)
        form_id: Foreign key to forms table
        text: Question text
        type: QuestionType value
        required: Whether respondents must answer
        options: Choices for option-bearing types, None otherwise
        position: Display order within the form, 0-based
    """

    __tablename__ = "questions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    form_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("forms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Foreign key to forms table"
    )

    text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Question text"
    )
    type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=QuestionType.TEXT.value,
        comment="Question type"
    )
    required: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Whether an answer is required"
    )
    options: Mapped[Optional[list]] = mapped_column(
        JSON,
        nullable=True,
        comment="Ordered choices for option-bearing types"
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Display order within the form"
    )

    form: Mapped["Form"] = relationship("Form", back_populates="questions")

    __table_args__ = (
        UniqueConstraint("form_id", "position", name="uq_questions_form_position"),
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<Question(id={self.id}, "
            f"form_id={self.form_id}, "
            f"type={self.type}, "
            f"position={self.position})>"
        )
