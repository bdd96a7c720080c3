"""User model for account credentials.

This module defines the User model, the credential store consulted when
signing in and the owner of every form.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime, select
from sqlalchemy.orm import Mapped, mapped_column, relationship, Session

from formly.models.database import Base, new_id, utcnow


class User(Base):
    """Model for registered form authors.

    Attributes:
        id: Primary key (UUID string)
        name: Optional display name
        email: Unique, lower-cased email address used to sign in
        password_hash: bcrypt hash of the password
        created_at: When the account was created
        updated_at: Last profile or password change
        forms: Forms owned by this user (deleted with the user)
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    name: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="Display name"
    )
    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        index=True,
        comment="Sign-in email, stored lower-cased"
    )
    password_hash: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        comment="bcrypt password hash"
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

    forms: Mapped[list["Form"]] = relationship(
        "Form",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @staticmethod
    def normalize_email(email: str) -> str:
        """Canonical form of an email address for storage and lookup."""
        return email.strip().lower()

    @classmethod
    def get_by_email(cls, db: Session, email: str) -> Optional["User"]:
        """Look up a user by email, case-insensitively.

        Args:
            db: Database session
            email: Email address as typed by the user

        Returns:
            User if found, None otherwise
        """
        return db.execute(
            select(cls).where(cls.email == cls.normalize_email(email))
        ).scalar_one_or_none()

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<User(id={self.id}, email={self.email})>"
