"""Rendering and submission validation for published forms.

Everything here is a pure function of the form definition, the requested
language and the candidate answers. The phone number is not a stored field:
it is always rendered first and is always required.
"""

import logging
import math
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional

from formcreator.schemas.forms import ApiModel, FieldDefinition, FieldType, FieldValidation, FormDefinition
from formcreator.services.bilingual_text import BilingualText, Language, parse_language, resolve
from formcreator.services.errors import (
    ConstraintViolation,
    MissingPhoneNumber,
    MissingRequiredField,
)

logger = logging.getLogger(__name__)

DEFAULT_SUBMIT_TEXT = BilingualText(en="Submit", ar="إرسال")
PHONE_NUMBER_LABEL = BilingualText(en="Phone Number", ar="رقم الهاتف")


class ControlKind(str, Enum):
    TEXT_INPUT = "text_input"
    EMAIL_INPUT = "email_input"
    PASSWORD_INPUT = "password_input"
    NUMBER_INPUT = "number_input"
    DATE_INPUT = "date_input"
    TIME_INPUT = "time_input"
    MULTILINE_INPUT = "multiline_input"
    DROPDOWN = "dropdown"
    RADIO_GROUP = "radio_group"
    CHECKBOX_GROUP = "checkbox_group"
    FILE_PICKER = "file_picker"


_CONTROLS = {
    FieldType.TEXT: ControlKind.TEXT_INPUT,
    FieldType.EMAIL: ControlKind.EMAIL_INPUT,
    FieldType.PASSWORD: ControlKind.PASSWORD_INPUT,
    FieldType.NUMBER: ControlKind.NUMBER_INPUT,
    FieldType.DATE: ControlKind.DATE_INPUT,
    FieldType.TIME: ControlKind.TIME_INPUT,
    FieldType.TEXTAREA: ControlKind.MULTILINE_INPUT,
    FieldType.SELECT: ControlKind.DROPDOWN,
    FieldType.RADIO: ControlKind.RADIO_GROUP,
    FieldType.CHECKBOX: ControlKind.CHECKBOX_GROUP,
    FieldType.FILE: ControlKind.FILE_PICKER,
}


class DisplayField(ApiModel):
    id: str
    type: FieldType
    control: ControlKind
    required: bool
    label: str
    placeholder: str
    options: list[str]
    validation: Optional[FieldValidation] = None


class DisplayForm(ApiModel):
    language: Language
    direction: str
    title: str
    description: str
    submit_button_text: str
    hero_image_url: Optional[str] = None
    phone_number_label: str
    fields: list[DisplayField]


def control_for(field: FieldDefinition) -> ControlKind:
    """Input control used to render *field*."""
    return _CONTROLS[FieldType(field.type)]


def resolve_display(form: FormDefinition, language=Language.EN) -> DisplayForm:
    """Resolve every bilingual slot of *form* for *language*, in field order."""
    lang = parse_language(language)
    submit_text = form.submit_button_text
    if submit_text is None or submit_text.is_empty():
        submit_text = DEFAULT_SUBMIT_TEXT

    fields = [
        DisplayField(
            id=field.id,
            type=field.type,
            control=control_for(field),
            required=field.required,
            label=resolve(field.label, lang),
            placeholder=resolve(field.placeholder, lang),
            options=[resolve(option, lang) for option in field.options],
            validation=field.validation,
        )
        for field in form.fields
    ]

    return DisplayForm(
        language=lang,
        direction="rtl" if lang is Language.AR else "ltr",
        title=resolve(form.title, lang),
        description=resolve(form.description, lang) if form.description else "",
        submit_button_text=resolve(submit_text, lang),
        hero_image_url=form.hero_image_url,
        phone_number_label=resolve(PHONE_NUMBER_LABEL, lang),
        fields=fields,
    )


def is_empty_answer(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set)):
        return len(value) == 0
    return False


def _check_constraints(field: FieldDefinition, value: Any, label: str) -> None:
    rules = field.validation
    if rules is None or is_empty_answer(value):
        return

    if field.type == FieldType.NUMBER and (rules.min is not None or rules.max is not None):
        try:
            if isinstance(value, bool):
                raise ValueError(value)
            number = float(value)
        except (TypeError, ValueError):
            raise ConstraintViolation(field.id, label, "must be a number")
        if not math.isfinite(number):
            raise ConstraintViolation(field.id, label, "must be a number")
        if rules.min is not None and number < rules.min:
            raise ConstraintViolation(field.id, label, f"must be at least {rules.min:g}")
        if rules.max is not None and number > rules.max:
            raise ConstraintViolation(field.id, label, f"must be at most {rules.max:g}")

    if rules.pattern:
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            if not isinstance(item, str):
                continue
            try:
                matched = re.fullmatch(rules.pattern, item)
            except re.error as e:
                logger.warning(f"Ignoring invalid pattern on field {field.id}: {e}")
                return
            if matched is None:
                raise ConstraintViolation(field.id, label, "does not match the expected format")


def validate_submission(
    form: FormDefinition,
    phone_number: Optional[str],
    answers: Optional[Mapping],
    language=Language.EN,
    enforce_constraints: bool = False,
) -> None:
    """Raise the first ValidationError found, in form order.

    min/max/pattern rules are only checked when *enforce_constraints* is set;
    otherwise they are hints for the input control.
    """
    if not (phone_number or "").strip():
        raise MissingPhoneNumber()

    answers = answers or {}
    lang = parse_language(language)
    for field in form.fields:
        value = answers.get(field.id)
        label = resolve(field.label, lang)
        if field.required and is_empty_answer(value):
            raise MissingRequiredField(field.id, label)
        if enforce_constraints:
            _check_constraints(field, value, label)


def normalize_answers(form: FormDefinition, answers: Optional[Mapping]) -> dict:
    """Storage shape of the answers: checkbox values are lists, files are names."""
    normalized = dict(answers or {})
    for field in form.fields:
        if field.id not in normalized:
            continue
        value = normalized[field.id]
        if field.type == FieldType.CHECKBOX and isinstance(value, str):
            normalized[field.id] = [value] if value else []
        elif field.type == FieldType.FILE and isinstance(value, Mapping):
            normalized[field.id] = value.get("name", "")
    return normalized
