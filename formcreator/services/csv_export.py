import csv
import io
import re
from typing import Iterable, Iterator

from formcreator.schemas.forms import FormDefinition
from formcreator.services.bilingual_text import Language, resolve

BASE_HEADERS = ["Response ID", "Phone Number", "Submitted At"]
LIST_SEPARATOR = "; "
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def export_filename(form: FormDefinition) -> str:
    return f"{re.sub(r'[^a-zA-Z0-9]', '_', resolve(form.title, Language.EN))}_responses.csv"


def header_row(form: FormDefinition, language=Language.EN) -> list[str]:
    return BASE_HEADERS + [resolve(field.label, language) for field in form.fields]


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return LIST_SEPARATOR.join(str(item) for item in value)
    return str(value)


def response_row(form: FormDefinition, response) -> list[str]:
    """One CSV row; *response* is a FormResponse row or a SubmissionRecord."""
    submitted_at = response.submitted_at.strftime(TIMESTAMP_FORMAT) if response.submitted_at else ""
    answers = response.response_data or {}
    row = [str(response.id), response.phone_number, submitted_at]
    row.extend(_cell(answers.get(field.id)) for field in form.fields)
    return row


def iter_csv(form: FormDefinition, responses: Iterable, language=Language.EN) -> Iterator[str]:
    """Yield the export chunk by chunk, header first, columns in field order."""
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(header_row(form, language))
    yield output.getvalue()
    output.seek(0)
    output.truncate(0)

    for response in responses:
        writer.writerow(response_row(form, response))
        yield output.getvalue()
        output.seek(0)
        output.truncate(0)


def build_csv(form: FormDefinition, responses: Iterable, language=Language.EN) -> str:
    return "".join(iter_csv(form, responses, language))
