"""Submissions API: respondent submissions, review and CSV export."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from formcreator.api.forms import get_active_form, serialize_form
from formcreator.config import settings
from formcreator.database import get_db
from formcreator.models.form import Form
from formcreator.models.form_response import FormResponse
from formcreator.schemas.responses import SubmissionCreate, SubmissionRecord
from formcreator.services.bilingual_text import parse_language
from formcreator.services.csv_export import export_filename, iter_csv
from formcreator.services.errors import ValidationError
from formcreator.services.form_renderer import normalize_answers, validate_submission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def serialize_response(response: FormResponse) -> SubmissionRecord:
    return SubmissionRecord(
        id=response.id,
        form_id=response.form_id,
        phone_number=response.phone_number,
        response_data=response.response_data or {},
        language=parse_language(response.language),
        submitted_at=response.submitted_at,
    )


def _get_any_form(db: Session, form_id: int) -> Form:
    """Forms are looked up regardless of is_active: old responses stay readable."""
    form = db.query(Form).filter(Form.id == form_id).first()
    if not form:
        raise HTTPException(status_code=404, detail="Form not found")
    return form


@router.post("/submit", response_model=SubmissionRecord)
def submit_form(submission: SubmissionCreate, db: Session = Depends(get_db)):
    form = serialize_form(get_active_form(db, submission.form_id))

    try:
        validate_submission(
            form,
            submission.phone_number,
            submission.response_data,
            language=submission.language,
            enforce_constraints=settings.enforce_field_constraints,
        )
    except ValidationError as e:
        logger.warning(f"Rejected submission for form {submission.form_id}: {e}")
        raise HTTPException(status_code=400, detail=e.to_detail())

    response = FormResponse(
        form_id=form.id,
        phone_number=submission.phone_number.strip(),
        response_data=normalize_answers(form, submission.response_data),
        language=submission.language.value,
        submitted_at=datetime.utcnow(),
    )
    db.add(response)
    db.commit()
    db.refresh(response)

    logger.info(f"Stored response {response.id} for form {form.id} ({response.language})")
    return serialize_response(response)


@router.get("/forms/{form_id}/responses", response_model=list[SubmissionRecord])
def list_responses(form_id: int, db: Session = Depends(get_db)):
    _get_any_form(db, form_id)
    responses = (db.query(FormResponse)
        .filter(FormResponse.form_id == form_id)
        .order_by(FormResponse.submitted_at.desc(), FormResponse.id.desc())
        .all())
    return [serialize_response(r) for r in responses]


@router.get("/forms/{form_id}/responses/export")
def export_responses(form_id: int, language: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """Download all responses as CSV, one column per field in form order."""
    form = serialize_form(_get_any_form(db, form_id))
    responses = (db.query(FormResponse)
        .filter(FormResponse.form_id == form_id)
        .order_by(FormResponse.submitted_at.desc(), FormResponse.id.desc())
        .all())

    filename = export_filename(form)
    return StreamingResponse(
        iter_csv(form, responses, parse_language(language)),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
