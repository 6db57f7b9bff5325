"""Tests for the /api/forms endpoints."""

from datetime import datetime
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError

from formcreator.models.form import Form
from tests.conftest import form_payload


def _create(client, **overrides):
    response = client.post("/api/forms", json=form_payload(**overrides))
    assert response.status_code == 200, response.text
    return response.json()


# ---------------------------------------------------------------------------
# Create / read
# ---------------------------------------------------------------------------


def test_create_form_returns_canonical_definition(client):
    """The created form echoes back camelCase keys and bilingual slots."""
    data = _create(client)

    assert data["id"] > 0
    assert data["isActive"] is True
    assert data["title"] == {"en": "Customer survey", "ar": "استبيان العملاء"}
    assert data["submitButtonText"] == {"en": "Send", "ar": "أرسل"}
    assert [f["id"] for f in data["fields"]] == ["field_name", "field_color", "field_topics"]
    assert data["fields"][1]["options"][0] == {"en": "Red", "ar": "أحمر"}
    assert data["shareUrl"].endswith(f"/form/{data['id']}")
    assert data["createdAt"] is not None


def test_create_form_accepts_legacy_string_text(client):
    payload = form_payload(
        title="Plain title",
        fields=[{"id": "f1", "type": "radio", "label": "Pick one", "options": ["Yes", "No"]}],
    )

    data = client.post("/api/forms", json=payload).json()

    assert data["title"] == {"en": "Plain title", "ar": ""}
    assert data["fields"][0]["label"] == {"en": "Pick one", "ar": ""}
    assert data["fields"][0]["options"] == [{"en": "Yes", "ar": ""}, {"en": "No", "ar": ""}]


def test_create_form_stores_sanitized_text(client, db_session):
    _create(client, title={"en": '{"en": "Wrapped", "ar": "ملفوف"}', "ar": ""})

    stored = db_session.query(Form).one()
    assert stored.title == {"en": "Wrapped", "ar": "ملفوف"}


def test_create_form_rejects_choice_field_without_options(client):
    payload = form_payload(fields=[{"id": "bad", "type": "select", "label": "Pick", "options": []}])

    response = client.post("/api/forms", json=payload)

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["error"] == "invalid_field_shape"
    assert detail["fieldId"] == "bad"


def test_create_form_rejects_duplicate_field_ids(client):
    fields = [{"id": "same", "type": "text", "label": "A"}, {"id": "same", "type": "text", "label": "B"}]
    response = client.post("/api/forms", json=form_payload(fields=fields))
    assert response.status_code == 422


def test_get_form(client):
    created = _create(client)

    response = client.get(f"/api/forms/{created['id']}")

    assert response.status_code == 200
    assert response.json()["fields"] == created["fields"]


def test_get_missing_form_returns_404(client):
    response = client.get("/api/forms/999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Form not found"


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


def test_list_forms_defaults(client):
    for index in range(7):
        _create(client, title={"en": f"Form {index}", "ar": ""})

    data = client.get("/api/forms").json()

    assert data["totalCount"] == 7
    assert data["page"] == 1
    assert data["pageSize"] == 5
    assert data["totalPages"] == 2
    assert [f["title"]["en"] for f in data["data"]] == ["Form 6", "Form 5", "Form 4", "Form 3", "Form 2"]


def test_list_forms_second_page(client):
    for index in range(7):
        _create(client, title={"en": f"Form {index}", "ar": ""})

    data = client.get("/api/forms", params={"page": 2, "pageSize": 5}).json()

    assert [f["title"]["en"] for f in data["data"]] == ["Form 1", "Form 0"]


def test_list_forms_invalid_paging_falls_back(client):
    _create(client)

    for params in ({"page": "abc", "pageSize": "-3"}, {"page": "0", "pageSize": "51"}):
        data = client.get("/api/forms", params=params).json()
        assert data["page"] == 1
        assert data["pageSize"] == 5


def test_list_forms_accepts_max_page_size(client):
    data = client.get("/api/forms", params={"pageSize": 50}).json()
    assert data["pageSize"] == 50
    assert data["totalPages"] == 0


# ---------------------------------------------------------------------------
# Update / delete
# ---------------------------------------------------------------------------


def test_update_form_replaces_fields(client):
    created = _create(client)
    payload = form_payload(fields=[{"id": "only", "type": "textarea", "label": {"en": "Notes", "ar": "ملاحظات"}}])

    response = client.put(f"/api/forms/{created['id']}", json=payload)

    assert response.status_code == 200
    updated = response.json()
    assert [f["id"] for f in updated["fields"]] == ["only"]
    assert datetime.fromisoformat(updated["updatedAt"]) >= datetime.fromisoformat(created["updatedAt"])


def test_update_form_rejects_bad_shape(client):
    created = _create(client)
    payload = form_payload(fields=[{"id": "t", "type": "text", "label": "T", "options": ["stray"]}])

    response = client.put(f"/api/forms/{created['id']}", json=payload)

    assert response.status_code == 422


def test_update_missing_form_returns_404(client):
    assert client.put("/api/forms/404", json=form_payload()).status_code == 404


def test_soft_delete_hides_form(client, db_session):
    created = _create(client)

    response = client.delete(f"/api/forms/{created['id']}")

    assert response.status_code == 200
    assert response.json() == {"message": "Form deleted successfully"}
    assert client.get(f"/api/forms/{created['id']}").status_code == 404
    assert client.get("/api/forms").json()["totalCount"] == 0
    assert db_session.query(Form).filter(Form.id == created["id"]).one().is_active is False


def test_soft_delete_twice_returns_404(client):
    created = _create(client)
    client.delete(f"/api/forms/{created['id']}")
    assert client.delete(f"/api/forms/{created['id']}").status_code == 404


def test_hard_delete_removes_form_and_responses(client, db_session):
    created = _create(client)
    client.post("/api/submit", json={"formId": created["id"], "phoneNumber": "123", "responseData": {"field_name": "A"}})

    response = client.delete(f"/api/forms/{created['id']}", params={"hard": "true"})

    assert response.json() == {"message": "Form deleted permanently"}
    assert db_session.query(Form).count() == 0
    assert client.get(f"/api/forms/{created['id']}/responses").status_code == 404


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------


def test_display_in_arabic(client):
    created = _create(client)

    data = client.get(f"/api/forms/{created['id']}/display", params={"language": "ar"}).json()

    assert data["direction"] == "rtl"
    assert data["title"] == "استبيان العملاء"
    assert data["submitButtonText"] == "أرسل"
    assert data["phoneNumberLabel"] == "رقم الهاتف"
    assert data["fields"][1]["control"] == "dropdown"
    assert data["fields"][1]["options"] == ["أحمر", "أزرق"]
    assert data["fields"][2]["options"] == ["News", "Sports"]


def test_display_defaults_to_english(client):
    created = _create(client, submitButtonText=None)

    data = client.get(f"/api/forms/{created['id']}/display").json()

    assert data["language"] == "en"
    assert data["direction"] == "ltr"
    assert data["submitButtonText"] == "Submit"


# ---------------------------------------------------------------------------
# Hero image
# ---------------------------------------------------------------------------


def _storage_mock():
    storage = MagicMock()
    storage.upload_image.return_value = "http://localhost:9000/formcreator-images/forms/1/abc.png"
    return storage


def test_upload_hero_image(client):
    created = _create(client)
    storage = _storage_mock()

    with patch("formcreator.api.forms.HeroImageStorage.get_instance", return_value=storage):
        response = client.post(
            f"/api/forms/{created['id']}/hero-image",
            files={"file": ("hero.png", b"\x89PNG fake", "image/png")},
        )

    assert response.status_code == 200
    assert response.json()["heroImageUrl"] == storage.upload_image.return_value
    storage.upload_image.assert_called_once_with(b"\x89PNG fake", created["id"], "image/png")
    storage.delete_image.assert_not_called()


def test_replacing_hero_image_deletes_previous(client):
    created = _create(client, heroImageUrl="http://localhost:9000/formcreator-images/forms/1/old.png")
    storage = _storage_mock()

    with patch("formcreator.api.forms.HeroImageStorage.get_instance", return_value=storage):
        client.post(
            f"/api/forms/{created['id']}/hero-image",
            files={"file": ("hero.png", b"new", "image/png")},
        )

    storage.delete_image.assert_called_once_with("http://localhost:9000/formcreator-images/forms/1/old.png")


def test_hero_image_must_be_an_image(client):
    created = _create(client)

    with patch("formcreator.api.forms.HeroImageStorage.get_instance") as get_instance:
        response = client.post(
            f"/api/forms/{created['id']}/hero-image",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

    assert response.status_code == 400
    get_instance.assert_not_called()


def test_hero_image_storage_failure_returns_502(client):
    created = _create(client)
    storage = _storage_mock()
    storage.upload_image.side_effect = ClientError({"Error": {"Code": "500"}}, "PutObject")

    with patch("formcreator.api.forms.HeroImageStorage.get_instance", return_value=storage):
        response = client.post(
            f"/api/forms/{created['id']}/hero-image",
            files={"file": ("hero.png", b"data", "image/png")},
        )

    assert response.status_code == 502


def test_create_form_requires_a_title(client):
    response = client.post("/api/forms", json=form_payload(title={"en": "  ", "ar": "عنوان"}))

    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "missing_title"


def test_update_form_requires_a_title(client):
    created = _create(client)
    response = client.put(f"/api/forms/{created['id']}", json=form_payload(title=""))
    assert response.status_code == 422
