"""Response aggregation: table rows, chart counts and CSV export.

All functions work on an in-memory form whose ``questions`` and
``responses`` (with ``answers``) are loaded; nothing here queries the
database. Answers are matched to questions by question id, so a question
added after a response was recorded, or an optional question the
respondent skipped, yields a placeholder instead of a value.

Checkbox answers are stored as one comma-joined string. Chart counts use
the stored string as is, so a checkbox answer "A,B" is one slice "A,B"
rather than one vote each for "A" and "B".
"""

import csv
import io
from collections import Counter
from datetime import datetime
from typing import Any, List, Tuple
from urllib.parse import quote

from formly.schemas.form import ChartSlice, ChartSummary, QuestionType

TABLE_PLACEHOLDER = "-"
CSV_PLACEHOLDER = ""

CSV_FIXED_HEADERS = ["Response ID", "Timestamp"]


def format_timestamp(value: datetime) -> str:
    """Render a response timestamp for tables and exports."""
    return value.isoformat(sep=" ", timespec="seconds")


def _answer_value(response: Any, question_id: str, placeholder: str) -> str:
    for answer in response.answers:
        if answer.question_id == question_id:
            return answer.value
    return placeholder


def _question_type(question: Any) -> QuestionType:
    return QuestionType(question.type)


def table_columns(form: Any) -> List[str]:
    """Column headers of the table projection."""
    return ["Timestamp"] + [question.text for question in form.questions]


def table_projection(form: Any) -> List[List[str]]:
    """One row per response: timestamp, then each answer in question order.

    Missing answers render as TABLE_PLACEHOLDER.
    """
    return [
        [format_timestamp(response.created_at)]
        + [
            _answer_value(response, question.id, TABLE_PLACEHOLDER)
            for question in form.questions
        ]
        for response in form.responses
    ]


def chart_distribution(form: Any, question_id: str) -> List[Tuple[str, int]]:
    """Count how often each answer value was given to a question.

    Only option-bearing questions have a distribution; other or unknown
    questions yield an empty list. Values appear in order of first
    occurrence.
    """
    question = next((q for q in form.questions if q.id == question_id), None)
    if question is None or not _question_type(question).has_options:
        return []

    counts: Counter = Counter()
    for response in form.responses:
        for answer in response.answers:
            if answer.question_id == question_id:
                counts[answer.value] += 1
    return list(counts.items())


def chart_summaries(form: Any) -> List[ChartSummary]:
    """Distribution plus counts for every option-bearing question."""
    summaries = []
    for question in form.questions:
        if not _question_type(question).has_options:
            continue
        distribution = chart_distribution(form, question.id)
        summaries.append(
            ChartSummary(
                question_id=question.id,
                text=question.text,
                option_count=len(question.options or []),
                response_count=sum(count for _, count in distribution),
                distribution=[
                    ChartSlice(name=value, value=count) for value, count in distribution
                ],
            )
        )
    return summaries


def csv_export(form: Any) -> str:
    """Export all responses as CSV text.

    Header row is Response ID, Timestamp and the question texts; each
    response follows with CSV_PLACEHOLDER for missing answers. Fields
    containing commas, quotes or line breaks are quoted; everything else
    is written verbatim. Rows are separated by "\\n".
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_FIXED_HEADERS + [question.text for question in form.questions])
    for response in form.responses:
        writer.writerow(
            [response.id, format_timestamp(response.created_at)]
            + [
                _answer_value(response, question.id, CSV_PLACEHOLDER)
                for question in form.questions
            ]
        )
    return buffer.getvalue().rstrip("\n")


def csv_filename(form: Any) -> str:
    """Download name for a form's CSV export."""
    safe_title = "".join(
        ch if ch.isalnum() or ch in " -_" else "_" for ch in form.title
    ).strip() or "form"
    return f"{safe_title}-responses.csv"


def csv_content_disposition(form: Any) -> str:
    """Content-Disposition value for downloading a form's CSV export.

    Header values must be Latin-1, so non-ASCII titles are sent in an
    RFC 5987 ``filename*`` parameter next to an ASCII ``filename``.
    """
    filename = csv_filename(form)
    fallback = "".join(
        ch if ch.isascii() and (ch.isalnum() or ch in " -_.") else "_" for ch in filename
    )
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"
