"""Application-wide settings."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings model."""

    ADMIN_API_SECRET: str
    FIREBASE_PROJECT_ID: str | None = None
    FIREBASE_SERVICE_ACCOUNT_CONTENT: str | None = None
    FIREBASE_SERVICE_ACCOUNT_PATH: str | None = None
    OPENAI_API_KEY: str | None = None
    LLM_MODEL_NAME: str = "gpt-4o-mini"
    LLM_TIMEOUT_SECONDS: int = 30
    DESCRIPTION_LLM_TEMPERATURE: float = 0.7
    REQUEST_TIMEOUT_SECONDS: int = 60
    EXTERNAL_API_TIMEOUT_SECONDS: int = 15
    FIRESTORE_TIMEOUT_SECONDS: int = 15
    GOOGLE_PLACES_API_KEY: str | None = None
    GOOGLE_PLACES_TIMEOUT_SECONDS: int = 10
    GOOGLE_PLACES_LANGUAGE_CODE: str = "en"
    LOCATIONS_CACHE_FRESH_TTL_SECONDS: int = 24 * 60 * 60
    LOCATIONS_CACHE_BACKGROUND_REFRESH_SECONDS: int = 60 * 60
    PLACE_DETAILS_CACHE_TTL_SECONDS: int = 24 * 60 * 60
    LOCAL_CACHE_DIR: str = ".cache/pamekids"
    LOCAL_CACHE_VERSION: str = "1.0"
    APP_ENV: str = "development"
    DOCS_MODE: str = "disabled"
    EXPOSE_INTERNAL_ERRORS: bool = False
    CORS_ALLOW_ORIGINS: str = ""
    CORS_ALLOW_METHODS: str = "GET,POST,PUT,PATCH,DELETE,OPTIONS"
    CORS_ALLOW_HEADERS: str = "Authorization,Content-Type,x-admin-secret"
    CORS_ALLOW_CREDENTIALS: bool = False
    SECURITY_HEADERS_ENABLED: bool = True
    ENABLE_HSTS: bool = False
    HSTS_MAX_AGE_SECONDS: int = 31536000
    PROXY_HEADERS_ENABLED: bool = True
    PROXY_TRUSTED_HOSTS: str = "127.0.0.1"
    TRUSTED_HOSTS: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("DESCRIPTION_LLM_TEMPERATURE", mode="before")
    @classmethod
    def _clamp_description_temperature(cls, value: object) -> float:
        try:
            numeric = float(value) if value is not None else 0.7
        except (TypeError, ValueError):
            numeric = 0.7
        return min(2.0, max(0.0, numeric))

    @field_validator(
        "LOCATIONS_CACHE_FRESH_TTL_SECONDS",
        "LOCATIONS_CACHE_BACKGROUND_REFRESH_SECONDS",
        "PLACE_DETAILS_CACHE_TTL_SECONDS",
        mode="before",
    )
    @classmethod
    def _non_negative_cache_seconds(cls, value: object) -> int:
        try:
            numeric = int(value) if value is not None else 0
        except (TypeError, ValueError):
            numeric = 0
        return max(0, numeric)


@lru_cache
def get_settings() -> Settings:
    """Return the Settings instance, built on first call and cached afterwards."""
    return Settings()
