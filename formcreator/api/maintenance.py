"""Maintenance API: one-off data repairs for rows written by older releases."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from formcreator.database import get_db
from formcreator.models.form import Form
from formcreator.services.bilingual_text import sanitize_for_storage

logger = logging.getLogger(__name__)

router = APIRouter()


def migrate_form_row(form: Form) -> int:
    """Rewrite every bilingual slot of *form* in canonical shape.

    Returns the number of values changed; the row is only touched when
    that number is non-zero.
    """
    changed = 0

    def migrate(value):
        nonlocal changed
        sanitized = sanitize_for_storage(value)
        if sanitized != value:
            changed += 1
        return sanitized

    title = migrate(form.title)
    description = migrate(form.description) if form.description is not None else None
    submit_text = (
        migrate(form.submit_button_text) if form.submit_button_text is not None else None
    )

    fields = []
    for index, field in enumerate(form.fields or []):
        before = changed
        field = dict(field)
        field["label"] = migrate(field.get("label"))
        field["placeholder"] = migrate(field.get("placeholder"))
        if field.get("options"):
            field["options"] = [migrate(option) for option in field["options"]]
        if changed != before:
            logger.info(f"Migrated field {index} ({field.get('id')}) of form {form.id}")
        fields.append(field)

    if changed:
        form.title = title
        form.description = description
        form.submit_button_text = submit_text
        form.fields = fields
    return changed


@router.post("/migrate-fields")
def migrate_fields(db: Session = Depends(get_db)):
    """Convert legacy plain-string and double-encoded text to bilingual records."""
    migrated_forms = 0
    migrated_fields = 0

    for form in db.query(Form).all():
        count = migrate_form_row(form)
        if count:
            migrated_forms += 1
            migrated_fields += count

    db.commit()
    logger.info(f"Migration complete: {migrated_forms} forms, {migrated_fields} values")
    return {"migrated_forms": migrated_forms, "migrated_fields": migrated_fields}
