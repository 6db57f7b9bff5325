"""Authoring operations on form fields.

All helpers return new values; the field list handed in is never mutated.
"""

import random
import re
import string
import time
from typing import Sequence

from formcreator.schemas.forms import CHOICE_TYPES, FieldDefinition, FieldType, FormDefinition
from formcreator.services.bilingual_text import BilingualText, normalize
from formcreator.services.errors import MissingTitle, ShapeError

FIELD_TYPE_LABELS = {
    FieldType.TEXT: "Text",
    FieldType.TEXTAREA: "Textarea",
    FieldType.PASSWORD: "Password",
    FieldType.EMAIL: "Email",
    FieldType.NUMBER: "Number",
    FieldType.DATE: "Date",
    FieldType.TIME: "Time",
    FieldType.CHECKBOX: "Checkbox",
    FieldType.RADIO: "Radio",
    FieldType.SELECT: "Select",
    FieldType.FILE: "File Upload",
}

DEFAULT_OPTION = "Option 1"
NEW_OPTION = "New Option"

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_field_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"field_{int(time.time() * 1000)}_{suffix}"


def create_field(field_type, label=None) -> FieldDefinition:
    """New field of *field_type* with builder defaults."""
    field_type = FieldType(field_type)
    if label is None:
        label = BilingualText(en=f"{FIELD_TYPE_LABELS[field_type]} Field")
    options = [BilingualText(en=DEFAULT_OPTION)] if field_type in CHOICE_TYPES else []
    return FieldDefinition(
        id=generate_field_id(),
        type=field_type,
        label=normalize(label),
        placeholder=BilingualText(),
        required=False,
        options=options,
    )


def _index_of(fields: Sequence, field_id: str) -> int:
    # Accepts field definitions or bare ids.
    for index, field in enumerate(fields):
        if getattr(field, "id", field) == field_id:
            return index
    return -1


def reorder(fields: Sequence, field_id: str, direction: str) -> list:
    """Swap the field with its neighbor; unchanged at the edges or for unknown ids."""
    current = _index_of(fields, field_id)
    if current == -1:
        return list(fields)
    if direction == "up":
        target = current - 1
    elif direction == "down":
        target = current + 1
    else:
        raise ValueError(f"Unknown direction: {direction}")
    if target < 0 or target >= len(fields):
        return list(fields)

    reordered = list(fields)
    reordered[current], reordered[target] = reordered[target], reordered[current]
    return reordered


def update_field(fields: Sequence[FieldDefinition], field_id: str, **changes) -> list:
    updated = []
    for field in fields:
        if field.id == field_id:
            # Re-validate so bilingual slots are coerced like on input.
            field = FieldDefinition.model_validate({**field.model_dump(), **changes})
        updated.append(field)
    return updated


def remove_field(fields: Sequence[FieldDefinition], field_id: str) -> list:
    return [field for field in fields if field.id != field_id]


def add_option(field: FieldDefinition, text=NEW_OPTION) -> FieldDefinition:
    return field.model_copy(update={"options": [*field.options, normalize(text)]})


def update_option(field: FieldDefinition, index: int, text) -> FieldDefinition:
    options = list(field.options)
    options[index] = normalize(text)
    return field.model_copy(update={"options": options})


def remove_option(field: FieldDefinition, index: int) -> FieldDefinition:
    options = [option for i, option in enumerate(field.options) if i != index]
    return field.model_copy(update={"options": options})


def validate_shape(field: FieldDefinition) -> None:
    """Raise ShapeError when the options list does not fit the field type."""
    name = field.label.en or field.id
    if field.is_choice and not field.options:
        raise ShapeError(field.id, f"Field '{name}' needs at least one option")
    if not field.is_choice and field.options:
        raise ShapeError(field.id, f"Field '{name}' of type {field.type.value} cannot have options")

    rules = field.validation
    if rules is None:
        return
    if rules.pattern:
        try:
            re.compile(rules.pattern)
        except re.error as e:
            raise ShapeError(field.id, f"Invalid pattern for field '{name}': {e}")
    if rules.min is not None and rules.max is not None and rules.min > rules.max:
        raise ShapeError(field.id, f"Field '{name}' has min greater than max")


def validate_fields(fields: Sequence[FieldDefinition]) -> None:
    """Shape-check every field and reject duplicate ids within one form."""
    seen = set()
    for field in fields:
        if field.id in seen:
            raise ShapeError(field.id, f"Duplicate field id: {field.id}")
        seen.add(field.id)
        validate_shape(field)


def validate_definition(definition: FormDefinition) -> None:
    """Everything checked before a form is saved: a title, then the fields."""
    if not definition.title.en.strip():
        raise MissingTitle()
    validate_fields(definition.fields)
