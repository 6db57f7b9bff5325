"""Pydantic models for form definitions as they travel over the API.

Keys are camelCase on the wire (``submitButtonText``, ``heroImageUrl``) and
snake_case in Python. Every bilingual slot is coerced through
:func:`formcreator.services.bilingual_text.normalize` on the way in, so legacy
string labels and double-encoded rows parse into the canonical shape.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from formcreator.services.bilingual_text import BilingualText, normalize


class FieldType(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    PASSWORD = "password"
    EMAIL = "email"
    NUMBER = "number"
    DATE = "date"
    TIME = "time"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    SELECT = "select"
    FILE = "file"


CHOICE_TYPES = frozenset({FieldType.CHECKBOX, FieldType.RADIO, FieldType.SELECT})


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldValidation(ApiModel):
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None


class FieldDefinition(ApiModel):
    id: str
    type: FieldType
    label: BilingualText = Field(default_factory=BilingualText)
    placeholder: BilingualText = Field(default_factory=BilingualText)
    required: bool = False
    options: list[BilingualText] = Field(default_factory=list)
    validation: Optional[FieldValidation] = None

    @field_validator("label", "placeholder", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        return normalize(value)

    @field_validator("options", mode="before")
    @classmethod
    def _coerce_options(cls, value):
        return [normalize(option) for option in (value or [])]

    @property
    def is_choice(self) -> bool:
        return self.type in CHOICE_TYPES


class FormDefinition(ApiModel):
    title: BilingualText
    description: Optional[BilingualText] = None
    submit_button_text: Optional[BilingualText] = None
    hero_image_url: Optional[str] = None
    fields: list[FieldDefinition] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value):
        return normalize(value)

    @field_validator("description", "submit_button_text", mode="before")
    @classmethod
    def _coerce_optional_text(cls, value):
        if value is None:
            return None
        return normalize(value)

    @field_validator("hero_image_url", mode="before")
    @classmethod
    def _blank_url_is_none(cls, value):
        return value or None

    @field_validator("fields", mode="before")
    @classmethod
    def _null_fields(cls, value):
        return value or []


class FormRead(FormDefinition):
    model_config = ConfigDict(from_attributes=True)

    id: int
    is_active: bool = True
    share_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FormPage(ApiModel):
    data: list[FormRead]
    total_count: int
    page: int
    page_size: int
    total_pages: int
