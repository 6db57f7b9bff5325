from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql://formcreator:formcreator@db:5432/formcreator"
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Public link base for shareable form URLs
    public_base_url: str = "http://localhost:3000"

    # Pagination for the forms dashboard
    default_page_size: int = 5
    max_page_size: int = 50

    # When True, numeric min/max and pattern rules block submissions
    # instead of only hinting the input control.
    enforce_field_constraints: bool = False

    # MinIO config for hero image storage
    minio_endpoint: str = "http://minio:9000"
    minio_public_url: str = "http://localhost:9000"
    minio_access_key: str = "formcreator"
    minio_secret_key: str = "formcreator-secret-key"
    minio_bucket: str = "formcreator-images"
    max_hero_image_bytes: int = 5 * 1024 * 1024

    class Config:
        env_file = ".env"


settings = Settings()
