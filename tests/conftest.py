"""Shared fixtures for form creator tests."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from formcreator.database import Base, get_db
from formcreator.models.form import Form  # noqa: F401 (register tables)
from formcreator.models.form_response import FormResponse  # noqa: F401
from formcreator.schemas.forms import FieldDefinition, FormDefinition


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared across connections for one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app(db_engine):
    """The FastAPI app with get_db bound to the test database."""
    from formcreator.main import app as fastapi_app

    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield fastapi_app
    fastapi_app.dependency_overrides = {}


@pytest.fixture
def client(app):
    return TestClient(app)


# ---------------------------------------------------------------------------
# Definition factories
# ---------------------------------------------------------------------------

def make_field(**overrides) -> FieldDefinition:
    """Create a FieldDefinition with sensible defaults."""
    defaults = {
        "id": "field_name",
        "type": "text",
        "label": {"en": "Full name", "ar": "الاسم الكامل"},
        "placeholder": {"en": "Your name", "ar": ""},
        "required": False,
        "options": [],
    }
    defaults.update(overrides)
    return FieldDefinition.model_validate(defaults)


def make_form(fields=None, **overrides) -> FormDefinition:
    """Create a FormDefinition with sensible defaults."""
    defaults = {
        "title": {"en": "Event registration", "ar": "التسجيل في الفعالية"},
        "description": {"en": "Tell us about yourself", "ar": ""},
        "fields": fields if fields is not None else [make_field()],
    }
    defaults.update(overrides)
    return FormDefinition.model_validate(defaults)


def form_payload(**overrides) -> dict:
    """JSON body for POST /api/forms, camelCase as the web client sends it."""
    payload = {
        "title": {"en": "Customer survey", "ar": "استبيان العملاء"},
        "description": {"en": "Help us improve", "ar": "ساعدنا على التحسن"},
        "submitButtonText": {"en": "Send", "ar": "أرسل"},
        "fields": [
            {
                "id": "field_name",
                "type": "text",
                "label": {"en": "Name", "ar": "الاسم"},
                "placeholder": {"en": "Your name", "ar": ""},
                "required": True,
            },
            {
                "id": "field_color",
                "type": "select",
                "label": {"en": "Favorite color", "ar": "اللون المفضل"},
                "required": False,
                "options": [{"en": "Red", "ar": "أحمر"}, {"en": "Blue", "ar": "أزرق"}],
            },
            {
                "id": "field_topics",
                "type": "checkbox",
                "label": {"en": "Topics", "ar": "المواضيع"},
                "required": False,
                "options": [{"en": "News", "ar": ""}, {"en": "Sports", "ar": ""}],
            },
        ],
    }
    payload.update(overrides)
    return payload
