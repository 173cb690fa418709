from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List, Optional

DEV_JWT_SECRET = "dev-only-insecure-secret-change-me"

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    environment: str = "development"
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # Sessions
    jwt_secret: str = DEV_JWT_SECRET
    jwt_algorithm: str = "HS256"
    token_expire_days: int = 7
    bcrypt_rounds: int = 10

    # Firebase
    firebase_project_id: Optional[str] = None
    firebase_private_key: Optional[str] = None
    firebase_client_email: Optional[str] = None
    firebase_storage_bucket: Optional[str] = None
    users_collection: str = "users"

    # Blob storage: "firebase" or "s3"
    storage_backend: str = "firebase"
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_bucket_name: Optional[str] = None
    s3_url_expires: int = 3600

    # Analysis: "static", "http" or "openai"
    analysis_provider: str = "static"
    analysis_api_url: Optional[str] = None
    analysis_timeout: float = 30.0
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4.1"

    # Uploads
    max_upload_bytes: int = 5 * 1024 * 1024

    # Front-end
    career_redirect_url: str = "/#careers"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

def check_settings(settings: Settings) -> None:
    """Refuse to run outside development with the built-in signing secret."""
    if not settings.is_development and settings.jwt_secret == DEV_JWT_SECRET:
        raise RuntimeError(
            "JWT_SECRET must be set for non-development environments"
        )

@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    check_settings(settings)
    return settings
