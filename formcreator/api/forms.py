"""Forms API: authoring, listing and publishing form definitions."""

import logging
from datetime import datetime
from typing import Optional

from botocore.exceptions import ClientError
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from formcreator.config import settings
from formcreator.database import get_db
from formcreator.models.form import Form
from formcreator.models.form_response import FormResponse
from formcreator.schemas.forms import FormDefinition, FormPage, FormRead
from formcreator.services.bilingual_text import sanitize_for_storage
from formcreator.services.errors import ShapeError
from formcreator.services.field_definitions import validate_definition
from formcreator.services.form_renderer import DisplayForm, resolve_display
from formcreator.services.hero_image_storage import HeroImageStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/forms")


def share_url(form_id: int) -> str:
    """Public link respondents open to pick a language and fill the form."""
    return f"{settings.public_base_url.rstrip('/')}/form/{form_id}"


def serialize_form(form: Form) -> FormRead:
    """Read a Form row into the canonical API shape."""
    return FormRead.model_validate({
        "id": form.id,
        "title": form.title,
        "description": form.description,
        "submit_button_text": form.submit_button_text,
        "hero_image_url": form.hero_image_url,
        "fields": form.fields,
        "is_active": form.is_active,
        "share_url": share_url(form.id),
        "created_at": form.created_at,
        "updated_at": form.updated_at,
    })


def get_active_form(db: Session, form_id: int) -> Form:
    form = db.query(Form).filter(Form.id == form_id, Form.is_active.is_(True)).first()
    if not form:
        raise HTTPException(status_code=404, detail="Form not found")
    return form


def _check_shape(definition: FormDefinition) -> None:
    try:
        validate_definition(definition)
    except ShapeError as e:
        raise HTTPException(status_code=422, detail=e.to_detail())


def _apply_definition(form: Form, definition: FormDefinition) -> None:
    """Copy a definition onto a row; bilingual slots are sanitized on the way."""
    form.title = sanitize_for_storage(definition.title)
    form.description = sanitize_for_storage(definition.description) if definition.description else None
    form.submit_button_text = (
        sanitize_for_storage(definition.submit_button_text) if definition.submit_button_text else None
    )
    form.hero_image_url = definition.hero_image_url
    form.fields = [
        {
            "id": field.id,
            "type": field.type.value,
            "label": sanitize_for_storage(field.label),
            "placeholder": sanitize_for_storage(field.placeholder),
            "required": field.required,
            "options": [sanitize_for_storage(option) for option in field.options],
            "validation": field.validation.model_dump(exclude_none=True) if field.validation else None,
        }
        for field in definition.fields
    ]


def _parse_positive(value: Optional[str], default: int, maximum: Optional[int] = None) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    if parsed <= 0 or (maximum is not None and parsed > maximum):
        return default
    return parsed


@router.post("", response_model=FormRead)
def create_form(definition: FormDefinition, db: Session = Depends(get_db)):
    _check_shape(definition)

    now = datetime.utcnow()
    form = Form(is_active=True, created_at=now, updated_at=now)
    _apply_definition(form, definition)
    db.add(form)
    db.commit()
    db.refresh(form)

    logger.info(f"Created form {form.id} with {len(definition.fields)} fields")
    return serialize_form(form)


@router.get("", response_model=FormPage)
def list_forms(
    page: Optional[str] = Query(None),
    page_size: Optional[str] = Query(None, alias="pageSize"),
    db: Session = Depends(get_db),
):
    """Active forms, newest first. Invalid paging values fall back to defaults."""
    page_number = _parse_positive(page, 1)
    size = _parse_positive(page_size, settings.default_page_size, settings.max_page_size)

    query = db.query(Form).filter(Form.is_active.is_(True))
    total_count = query.count()
    total_pages = (total_count + size - 1) // size

    forms = (query
        .order_by(Form.created_at.desc(), Form.id.desc())
        .offset((page_number - 1) * size)
        .limit(size)
        .all())

    return FormPage(
        data=[serialize_form(form) for form in forms],
        total_count=total_count,
        page=page_number,
        page_size=size,
        total_pages=total_pages,
    )


@router.get("/{form_id}", response_model=FormRead)
def get_form(form_id: int, db: Session = Depends(get_db)):
    return serialize_form(get_active_form(db, form_id))


@router.get("/{form_id}/display", response_model=DisplayForm)
def get_form_display(form_id: int, language: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """Form resolved for one language, ready for the public page."""
    form = serialize_form(get_active_form(db, form_id))
    return resolve_display(form, language)


@router.put("/{form_id}", response_model=FormRead)
def update_form(form_id: int, definition: FormDefinition, db: Session = Depends(get_db)):
    form = get_active_form(db, form_id)
    _check_shape(definition)

    _apply_definition(form, definition)
    form.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(form)

    logger.info(f"Updated form {form.id}")
    return serialize_form(form)


@router.delete("/{form_id}")
def delete_form(form_id: int, hard: bool = Query(False), db: Session = Depends(get_db)):
    """Soft delete: the form disappears from listings, its responses stay readable.

    With ``hard=true`` the row and all of its responses are removed.
    """
    if hard:
        form = db.query(Form).filter(Form.id == form_id).first()
        if not form:
            raise HTTPException(status_code=404, detail="Form not found")
        removed = (db.query(FormResponse)
            .filter(FormResponse.form_id == form_id)
            .delete(synchronize_session=False))
        db.delete(form)
        db.commit()
        logger.info(f"Deleted form {form_id} and {removed} responses")
        return {"message": "Form deleted permanently"}

    form = get_active_form(db, form_id)
    form.is_active = False
    form.updated_at = datetime.utcnow()
    db.commit()

    logger.info(f"Deactivated form {form_id}")
    return {"message": "Form deleted successfully"}


@router.post("/{form_id}/hero-image", response_model=FormRead)
async def upload_hero_image(form_id: int, file: UploadFile = File(...), db: Session = Depends(get_db)):
    form = get_active_form(db, form_id)

    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Hero image must be an image file")

    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Hero image is empty")
    if len(data) > settings.max_hero_image_bytes:
        raise HTTPException(status_code=413, detail="Hero image is too large")

    storage = HeroImageStorage.get_instance()
    previous_url = form.hero_image_url
    try:
        form.hero_image_url = storage.upload_image(data, form.id, content_type)
    except ClientError as e:
        logger.error(f"Hero image upload failed for form {form.id}: {e}", exc_info=True)
        raise HTTPException(status_code=502, detail="Image storage unavailable")
    form.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(form)

    if previous_url:
        storage.delete_image(previous_url)

    return serialize_form(form)
