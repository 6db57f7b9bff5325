import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from formcreator.api import forms, maintenance, submissions
from formcreator.config import settings
from formcreator.database import Base, engine, get_db
from formcreator.models import form, form_response  # noqa: F401 (register tables)

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("formcreator")


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        logger.error(f"Could not create tables: {e}", exc_info=True)
    yield


app = FastAPI(
    title="Dynamic Form Creator API",
    description="Bilingual form builder: form definitions, public submissions and exports",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(forms.router, tags=["forms"])
app.include_router(submissions.router, tags=["submissions"])
app.include_router(maintenance.router, tags=["maintenance"])


@app.get("/")
async def root():
    return {"message": "Dynamic Form Creator API", "status": "ok"}


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError as e:
        logger.warning(f"Database health check failed: {e}")
        database = "unavailable"

    return {
        "status": "healthy",
        "database": database,
    }
