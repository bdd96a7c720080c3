"""Form persistence and ownership checks.

This module stores forms and their questions and enforces who may read or
change them:

- a published form is readable by anyone
- an unpublished form is readable only by its owner
- only the owner may replace or delete a form, or list its responses
"""

from typing import Dict, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from formly.logging_config import get_logger
from formly.models.database import new_id
from formly.models.form import Form, Question
from formly.models.response import FormResponse
from formly.schemas.form import QuestionIn
from formly.services.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
)

logger = get_logger(__name__)


def build_questions(
    questions: Sequence[QuestionIn],
    reusable_ids: Optional[set] = None,
) -> List[Question]:
    """Turn question payloads into Question rows with positions 0..n-1.

    Options are dropped for types that do not carry them. A payload id is
    kept only if it names one of the form's current questions, so answers
    recorded against that question stay attached after a save.

    Args:
        questions: Questions in display order
        reusable_ids: Ids of the questions being replaced

    Returns:
        New, unsaved Question objects
    """
    reusable = set(reusable_ids or ())
    rows = []
    for position, question in enumerate(questions):
        if question.id and question.id in reusable:
            question_id = question.id
            reusable.discard(question.id)
        else:
            question_id = new_id()

        rows.append(
            Question(
                id=question_id,
                text=question.text,
                type=question.type.value,
                required=question.required,
                options=list(question.options or []) if question.type.has_options else None,
                position=position,
            )
        )
    return rows


class FormRepository:
    """CRUD operations on forms bound to a database session."""

    def __init__(self, db: Session):
        """Initialize the repository.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def create(
        self,
        owner_id: str,
        title: str,
        description: Optional[str],
        questions: Sequence[QuestionIn],
        published: bool = True,
    ) -> Form:
        """Create a form with its questions.

        Forms created through the API are published immediately.

        Args:
            owner_id: Id of the creating user
            title: Form title
            description: Optional description
            questions: Questions in display order
            published: Whether the form starts out public

        Returns:
            The persisted Form
        """
        form = Form(
            title=title,
            description=description,
            published=published,
            owner_id=owner_id,
            questions=build_questions(questions),
        )
        self.db.add(form)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Created form with {len(form.questions)} questions",
            extra={"form_id": form.id, "user_id": owner_id},
        )
        return form

    def list_for_owner(self, owner_id: str) -> List[Form]:
        """List a user's forms, most recently updated first."""
        return list(
            self.db.execute(
                select(Form)
                .where(Form.owner_id == owner_id)
                .order_by(Form.updated_at.desc(), Form.created_at.desc())
            ).scalars()
        )

    def count_responses(self, form_ids: Sequence[str]) -> Dict[str, int]:
        """Count responses per form without loading them.

        Returns:
            Mapping of form id to response count; forms without responses
            are absent
        """
        if not form_ids:
            return {}
        rows = self.db.execute(
            select(FormResponse.form_id, func.count(FormResponse.id))
            .where(FormResponse.form_id.in_(list(form_ids)))
            .group_by(FormResponse.form_id)
        ).all()
        return {form_id: count for form_id, count in rows}

    def _load(self, form_id: str) -> Form:
        form = self.db.get(Form, form_id)
        if form is None:
            raise NotFoundError("Form not found")
        return form

    def get_by_id(self, form_id: str, requester_id: Optional[str] = None) -> Form:
        """Fetch a form for reading.

        Args:
            form_id: Form to fetch
            requester_id: Signed-in user, or None for anonymous visitors

        Returns:
            The Form

        Raises:
            NotFoundError: If the form does not exist
            AuthenticationError: If the form is unpublished and nobody is
                signed in
            AuthorizationError: If the form is unpublished and the
                requester is not its owner
        """
        form = self._load(form_id)
        if form.published:
            return form

        if requester_id is None:
            raise AuthenticationError("Not authorized")
        if not form.is_owned_by(requester_id):
            logger.warning(
                "Read of unpublished form by non-owner refused",
                extra={"form_id": form_id, "user_id": requester_id},
            )
            raise AuthorizationError()
        return form

    def get_owned(self, form_id: str, owner_id: str) -> Form:
        """Fetch a form the requester must own.

        Raises:
            NotFoundError: If the form does not exist
            AuthorizationError: If the requester is not the owner
        """
        form = self._load(form_id)
        if not form.is_owned_by(owner_id):
            logger.warning(
                "Owner-only access refused",
                extra={"form_id": form_id, "user_id": owner_id},
            )
            raise AuthorizationError()
        return form

    def replace(
        self,
        form_id: str,
        owner_id: str,
        title: str,
        description: Optional[str],
        published: bool,
        questions: Sequence[QuestionIn],
    ) -> Form:
        """Overwrite a form's fields and its whole question list.

        The existing questions are deleted and the new ones inserted with
        positions 0..n-1, together with the field update, in one
        transaction. On any failure the transaction is rolled back and the
        previous form is left as it was.

        Raises:
            NotFoundError: If the form does not exist
            AuthorizationError: If the requester is not the owner
        """
        form = self.get_owned(form_id, owner_id)

        try:
            current_ids = {question.id for question in form.questions}

            # Flush the deletes first: positions and reused ids must be
            # free before the new rows are inserted
            form.questions.clear()
            self.db.flush()

            form.questions.extend(build_questions(questions, reusable_ids=current_ids))
            form.title = title
            form.description = description
            form.published = published
            form.touch()

            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error("Form replace rolled back", extra={"form_id": form_id}, exc_info=True)
            raise

        logger.info(
            f"Replaced form with {len(form.questions)} questions",
            extra={"form_id": form.id, "user_id": owner_id},
        )
        return form

    def delete(self, form_id: str, owner_id: str) -> None:
        """Delete a form with its questions, responses and answers.

        Raises:
            NotFoundError: If the form does not exist
            AuthorizationError: If the requester is not the owner
        """
        form = self.get_owned(form_id, owner_id)

        self.db.delete(form)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Deleted form", extra={"form_id": form_id, "user_id": owner_id})

