"""Public submission flow.

Records an anonymous visitor's answers to a published form. Either the
whole response is stored with all of its answers, or nothing is.
"""

from typing import Dict, Sequence

from sqlalchemy.orm import Session

from formly.logging_config import get_logger
from formly.models.form import Form
from formly.models.response import Answer, FormResponse
from formly.schemas.form import AnswerIn
from formly.services.errors import FormValidationError, NotFoundError

logger = get_logger(__name__)


class SubmissionService:
    """Validates and stores responses to published forms."""

    def __init__(self, db: Session):
        """Initialize the service.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def load_published_form(self, form_id: str) -> Form:
        """Fetch a form that accepts responses.

        Missing and unpublished forms are reported the same way so
        visitors learn nothing about forms they cannot see.

        Raises:
            NotFoundError: If the form is absent or unpublished
        """
        form = self.db.get(Form, form_id)
        if form is None or not form.published:
            raise NotFoundError("Form not found or not published")
        return form

    @staticmethod
    def collect_answers(form: Form, answers: Sequence[AnswerIn]) -> Dict[str, str]:
        """Check submitted answers against the form's questions.

        Args:
            form: Published form being answered
            answers: Submitted answers

        Returns:
            Mapping of question id to value for every non-blank answer

        Raises:
            FormValidationError: If an answer names a question that is not
                on the form, a question is answered twice, or a required
                question is missing or blank (the first one in form order
                is reported)
        """
        question_ids = {question.id for question in form.questions}
        values: Dict[str, str] = {}

        for answer in answers:
            if answer.question_id not in question_ids:
                raise FormValidationError("Answer refers to an unknown question")
            if answer.question_id in values:
                raise FormValidationError("Each question can only be answered once")
            values[answer.question_id] = answer.value

        for question in form.questions:
            if question.required and not values.get(question.id, "").strip():
                raise FormValidationError(f'Question "{question.text}" is required')

        # Blank answers to optional questions are not recorded
        return {qid: value for qid, value in values.items() if value.strip()}

    def submit(self, form_id: str, answers: Sequence[AnswerIn]) -> FormResponse:
        """Record a response to a published form.

        Args:
            form_id: Form being answered
            answers: Submitted answers

        Returns:
            The stored FormResponse with its answers

        Raises:
            NotFoundError: If the form is absent or unpublished
            FormValidationError: If the answers do not satisfy the form
        """
        form = self.load_published_form(form_id)

        try:
            values = self.collect_answers(form, answers)
        except FormValidationError as e:
            logger.info(f"Submission rejected: {e.message}", extra={"form_id": form_id})
            raise

        response = FormResponse(
            form_id=form.id,
            answers=[
                Answer(question_id=question_id, value=value)
                for question_id, value in values.items()
            ],
        )
        self.db.add(response)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Recorded response with {len(response.answers)} answers",
            extra={"form_id": form_id, "response_id": response.id},
        )
        return response
