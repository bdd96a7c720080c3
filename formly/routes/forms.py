"""Form endpoints for authors: list, create, read, replace and delete.

Create and replace bodies are checked with the same rules the editor
applies before saving (see FormDraft.validate) and rejected with 400 on
the first problem found.
"""

from typing import List, Optional, Union

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from formly.logging_config import get_logger
from formly.middleware.session_auth import get_current_user_id, get_optional_user_id
from formly.models.database import get_db
from formly.models.form import Form
from formly.schemas.auth import SuccessResponse
from formly.schemas.form import (
    FormCreate,
    FormDetailOut,
    FormOut,
    FormSummaryOut,
    FormUpdate,
)
from formly.services.errors import FormValidationError
from formly.services.form_editor import FormDraft
from formly.services.form_repository import FormRepository

logger = get_logger(__name__)

router = APIRouter(prefix="/api/forms")


def validated_payload(body: FormCreate) -> FormUpdate:
    """Run a request body through the editor's save path.

    Returns:
        Normalized payload with options nulled for types without options

    Raises:
        FormValidationError: With the first problem found
    """
    draft = FormDraft.from_payload(body)
    result = draft.validate()
    if not result.is_valid:
        logger.info(f"Form payload rejected: {result.error_message}")
        raise FormValidationError(result.error_message)
    return draft.to_payload()


def form_detail(form: Form) -> FormDetailOut:
    return FormDetailOut.model_validate(form)


@router.get("", response_model=List[FormSummaryOut])
def list_forms(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> List[FormSummaryOut]:
    """The signed-in user's forms, most recently updated first."""
    repository = FormRepository(db)
    forms = repository.list_for_owner(user_id)
    counts = repository.count_responses([form.id for form in forms])
    return [
        FormSummaryOut(
            **FormOut.model_validate(form).model_dump(),
            response_count=counts.get(form.id, 0),
        )
        for form in forms
    ]


@router.post("", response_model=FormOut)
def create_form(
    body: FormCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> FormOut:
    """Create a form; it is published straight away."""
    payload = validated_payload(body)
    form = FormRepository(db).create(
        owner_id=user_id,
        title=payload.title,
        description=payload.description,
        questions=payload.questions,
        published=True,
    )
    return FormOut.model_validate(form)


@router.get("/{form_id}", response_model=None)
def read_form(
    form_id: str,
    user_id: Optional[str] = Depends(get_optional_user_id),
    db: Session = Depends(get_db),
) -> Union[FormDetailOut, FormOut]:
    """Read a form.

    Anyone may read a published form; its responses are included only for
    the owner. Unpublished forms are visible to the owner alone.
    """
    form = FormRepository(db).get_by_id(form_id, requester_id=user_id)
    if form.is_owned_by(user_id):
        return form_detail(form)
    return FormOut.model_validate(form)


@router.put("/{form_id}", response_model=FormDetailOut)
def replace_form(
    form_id: str,
    body: FormUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> FormDetailOut:
    """Save a form: fields and the complete question list, atomically."""
    repository = FormRepository(db)
    # Ownership before payload checks so strangers learn nothing
    repository.get_owned(form_id, user_id)

    payload = validated_payload(body)
    form = repository.replace(
        form_id,
        user_id,
        title=payload.title,
        description=payload.description,
        published=payload.published,
        questions=payload.questions,
    )
    return form_detail(form)


@router.delete("/{form_id}", response_model=SuccessResponse)
def delete_form(
    form_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    FormRepository(db).delete(form_id, user_id)
    return SuccessResponse()
