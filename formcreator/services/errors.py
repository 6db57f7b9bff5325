"""Error taxonomy shared by the form builder, the submission path and the client."""

from typing import Optional


class FormError(Exception):
    """Base class for all form creator errors."""

    code = "form_error"

    def to_detail(self) -> dict:
        return {"error": self.code, "message": str(self)}


class ShapeError(FormError):
    """A form definition cannot be saved as authored."""

    code = "invalid_field_shape"

    def __init__(self, field_id: str, message: str):
        super().__init__(message)
        self.field_id = field_id

    def to_detail(self) -> dict:
        return {**super().to_detail(), "fieldId": self.field_id}


class MissingTitle(ShapeError):
    code = "missing_title"

    def __init__(self):
        super().__init__("title", "Form title is required")


class ValidationError(FormError):
    """A candidate submission was rejected."""

    code = "invalid_submission"


class MissingPhoneNumber(ValidationError):
    code = "missing_phone_number"

    def __init__(self):
        super().__init__("Phone number is required")


class MissingRequiredField(ValidationError):
    code = "missing_required_field"

    def __init__(self, field_id: str, label: str):
        super().__init__(f"{label or field_id} is required")
        self.field_id = field_id
        self.label = label

    def to_detail(self) -> dict:
        return {**super().to_detail(), "fieldId": self.field_id, "label": self.label}


class ConstraintViolation(ValidationError):
    """An answer broke the field's min/max/pattern rule."""

    code = "constraint_violation"

    def __init__(self, field_id: str, label: str, reason: str):
        super().__init__(f"{label or field_id}: {reason}")
        self.field_id = field_id
        self.label = label
        self.reason = reason

    def to_detail(self) -> dict:
        return {**super().to_detail(), "fieldId": self.field_id, "label": self.label, "reason": self.reason}


class NotFound(FormError):
    code = "not_found"

    def __init__(self, message: str = "Form not found", resource_id: Optional[int] = None):
        super().__init__(message)
        self.resource_id = resource_id


class TransportError(FormError):
    """Network or server failure talking to the forms API. Safe to retry."""

    code = "transport_error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
