"""English/Arabic text values and the coercion rules for legacy data.

Older rows store labels as bare strings, and some rows were JSON-encoded
twice before they reached the database, leaving a bilingual object serialized
inside the ``en`` slot of another one.  Everything that enters or leaves the
database goes through :func:`normalize` / :func:`sanitize_for_storage` so the
rest of the service only ever sees the canonical ``{"en": ..., "ar": ...}``
shape.
"""

import json
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict


class Language(str, Enum):
    EN = "en"
    AR = "ar"


DEFAULT_LANGUAGE = Language.EN


class BilingualText(BaseModel):
    model_config = ConfigDict(frozen=True)

    en: str = ""
    ar: str = ""

    def is_empty(self) -> bool:
        return not self.en and not self.ar


def parse_language(value: Union[str, Language, None]) -> Language:
    """Map a request language tag to a Language, defaulting to English."""
    if isinstance(value, Language):
        return value
    try:
        return Language((value or "").strip().lower())
    except ValueError:
        return DEFAULT_LANGUAGE


def _decode(raw: Any) -> Optional[Mapping]:
    """Return the bilingual object hidden in *raw*, if there is one."""
    if isinstance(raw, Mapping):
        return raw if ("en" in raw or "ar" in raw) else None
    if not isinstance(raw, str):
        return None
    candidate = raw.strip()
    if not candidate.startswith("{"):
        return None
    try:
        decoded = json.loads(candidate)
    except ValueError:
        return None
    if isinstance(decoded, dict) and ("en" in decoded or "ar" in decoded):
        return decoded
    return None


def _as_text(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    return str(raw)


def _from_mapping(value: Mapping) -> BilingualText:
    en_raw = value.get("en")
    ar_raw = value.get("ar")
    en_inner = _decode(en_raw)
    ar_inner = _decode(ar_raw)

    if en_inner is None and ar_inner is None:
        return BilingualText(en=_as_text(en_raw), ar=_as_text(ar_raw))

    from_en = _from_mapping(en_inner) if en_inner is not None else BilingualText()
    from_ar = _from_mapping(ar_inner) if ar_inner is not None else BilingualText()
    # Each slot prefers its own unwrapped value, then the other slot's, then
    # the outer plain text.
    outer_en = "" if en_inner is not None else _as_text(en_raw)
    outer_ar = "" if ar_inner is not None else _as_text(ar_raw)
    return BilingualText(
        en=from_en.en or from_ar.en or outer_en,
        ar=from_ar.ar or from_en.ar or outer_ar,
    )


def normalize(value: Any) -> BilingualText:
    """Coerce any stored or submitted text value into a BilingualText.

    ``None`` becomes empty text, a plain string becomes the English variant,
    and objects are unwrapped when one of their slots holds a JSON-encoded
    bilingual object. Malformed JSON is kept as literal text.
    """
    if value is None:
        return BilingualText()
    if isinstance(value, str):
        return BilingualText(en=value, ar="")
    if isinstance(value, BilingualText):
        return _from_mapping({"en": value.en, "ar": value.ar})
    if isinstance(value, Mapping):
        return _from_mapping(value)
    return BilingualText(en=str(value), ar="")


def resolve(text: Any, language: Union[str, Language, None] = DEFAULT_LANGUAGE) -> str:
    """Display string for *language*, falling back to English, then to ""."""
    if not isinstance(text, BilingualText):
        text = normalize(text)
    lang = parse_language(language)
    return getattr(text, lang.value) or text.en or ""


def sanitize_for_storage(value: Any) -> dict:
    """Canonical dict for a JSON column; never double-encoded."""
    text = normalize(value)
    return {"en": text.en, "ar": text.ar}
