"""Response endpoints.

Visitors submit answers to published forms without signing in. Everything
else here (listing, summary, CSV export) is for the form's owner.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from formly.middleware.session_auth import get_current_user_id
from formly.models.database import get_db
from formly.schemas.form import (
    FormDetailOut,
    ResponseOut,
    ResponseSummaryOut,
    SubmissionIn,
)
from formly.services import aggregator
from formly.services.form_repository import FormRepository
from formly.services.submission import SubmissionService

router = APIRouter(prefix="/api/forms/{form_id}/responses")


@router.get("", response_model=FormDetailOut)
def list_responses(
    form_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> FormDetailOut:
    """The form with all of its responses, newest first."""
    form = FormRepository(db).get_owned(form_id, user_id)
    return FormDetailOut.model_validate(form)


@router.post("", response_model=ResponseOut)
def submit_response(
    form_id: str,
    body: SubmissionIn,
    db: Session = Depends(get_db),
) -> ResponseOut:
    """Record one visitor's answers to a published form."""
    response = SubmissionService(db).submit(form_id, body.answers)
    return ResponseOut.model_validate(response)


@router.get("/summary", response_model=ResponseSummaryOut)
def response_summary(
    form_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ResponseSummaryOut:
    """Table projection and chart counts for the owner's results view."""
    form = FormRepository(db).get_owned(form_id, user_id)
    return ResponseSummaryOut(
        columns=aggregator.table_columns(form),
        rows=aggregator.table_projection(form),
        charts=aggregator.chart_summaries(form),
    )


@router.get("/export")
def export_responses(
    form_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Response:
    """Download all responses as a CSV file."""
    form = FormRepository(db).get_owned(form_id, user_id)
    return Response(
        content=aggregator.csv_export(form),
        media_type="text/csv",
        headers={"Content-Disposition": aggregator.csv_content_disposition(form)},
    )
