from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from formcreator.schemas.forms import ApiModel
from formcreator.services.bilingual_text import Language, parse_language


class SubmissionCreate(ApiModel):
    form_id: int
    phone_number: str = ""
    response_data: dict[str, Any] = Field(default_factory=dict)
    language: Language = Language.EN

    @field_validator("phone_number", mode="before")
    @classmethod
    def _null_phone(cls, value):
        return value or ""

    @field_validator("response_data", mode="before")
    @classmethod
    def _null_answers(cls, value):
        return value or {}

    @field_validator("language", mode="before")
    @classmethod
    def _default_language(cls, value):
        return parse_language(value)


class SubmissionRecord(ApiModel):
    id: int
    form_id: int
    phone_number: str
    response_data: dict[str, Any]
    language: Language = Language.EN
    submitted_at: Optional[datetime] = None
