import httpx
from typing import Optional

from formcreator.schemas.forms import FormDefinition, FormPage, FormRead
from formcreator.schemas.responses import SubmissionCreate, SubmissionRecord
from formcreator.services.errors import (
    ConstraintViolation,
    MissingPhoneNumber,
    MissingRequiredField,
    MissingTitle,
    NotFound,
    ShapeError,
    TransportError,
    ValidationError,
)


class FormsClient:
    """Async client for the forms API.

    Failures are raised, never retried: NotFound for 404, the matching
    ValidationError subclass for rejected submissions, ShapeError for rejected
    definitions and TransportError for everything else.
    """

    def __init__(self, base_url: str = "http://localhost:5000", timeout: float = 30.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def _request(self, method: str, path: str, **kwargs):
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(method, f"{self.base_url}{path}", **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        if response.status_code == 404:
            raise NotFound(f"{path} not found")
        if response.status_code == 400:
            raise _submission_error(_detail(response))
        if response.status_code == 422:
            detail = _detail(response)
            if isinstance(detail, dict) and detail.get("error") == MissingTitle.code:
                raise MissingTitle()
            if isinstance(detail, dict) and detail.get("error") == ShapeError.code:
                raise ShapeError(detail.get("fieldId", ""), detail.get("message", ""))
        if response.status_code >= 400:
            raise TransportError(
                f"{method} {path} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        return response.json()

    async def create_form(self, definition: FormDefinition) -> FormRead:
        data = await self._request("POST", "/api/forms", json=_dump(definition))
        return FormRead.model_validate(data)

    async def get_form(self, form_id: int) -> FormRead:
        data = await self._request("GET", f"/api/forms/{form_id}")
        return FormRead.model_validate(data)

    async def list_forms(self, page: int = 1, page_size: int = 5) -> FormPage:
        data = await self._request("GET", "/api/forms", params={"page": page, "pageSize": page_size})
        return FormPage.model_validate(data)

    async def update_form(self, form_id: int, definition: FormDefinition) -> FormRead:
        data = await self._request("PUT", f"/api/forms/{form_id}", json=_dump(definition))
        return FormRead.model_validate(data)

    async def delete_form(self, form_id: int) -> None:
        await self._request("DELETE", f"/api/forms/{form_id}")

    async def submit_form(self, submission: SubmissionCreate) -> SubmissionRecord:
        data = await self._request("POST", "/api/submit", json=_dump(submission))
        return SubmissionRecord.model_validate(data)

    async def list_responses(self, form_id: int) -> list[SubmissionRecord]:
        data = await self._request("GET", f"/api/forms/{form_id}/responses")
        return [SubmissionRecord.model_validate(item) for item in data]


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def _detail(response: httpx.Response):
    try:
        data = response.json()
    except ValueError:
        return response.text
    return data.get("detail") if isinstance(data, dict) else data


def _submission_error(detail) -> ValidationError:
    """Rebuild the server's ValidationError subclass from a 400 detail."""
    if not isinstance(detail, dict):
        return ValidationError(detail or "Submission rejected")

    code = detail.get("error")
    field_id = detail.get("fieldId", "")
    if code == MissingPhoneNumber.code:
        return MissingPhoneNumber()
    if code == MissingRequiredField.code:
        return MissingRequiredField(field_id, detail.get("label", ""))
    if code == ConstraintViolation.code:
        return ConstraintViolation(field_id, detail.get("label", ""), detail.get("reason", ""))
    return ValidationError(detail.get("message") or "Submission rejected")
