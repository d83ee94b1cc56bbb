"""
Settings for Learner's Amigo, read from the environment and ``.env``.

Only ``JWT_SECRET_KEY`` is required. Everything else has a local default;
provider keys left empty make the corresponding calls fail at request time.
"""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ASYNC_DRIVERS = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    app_name: str = "Learner's Amigo"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    sql_echo: bool = False

    # Any SQLAlchemy URL; plain postgres/sqlite schemes get their async driver
    database_url: str = "postgresql+asyncpg://amigo@localhost:5432/amigo"
    database_ssl: bool = False

    @field_validator("database_url")
    @classmethod
    def use_async_driver(cls, url: str) -> str:
        for scheme, async_scheme in _ASYNC_DRIVERS.items():
            if url.startswith(scheme):
                url = async_scheme + url[len(scheme):]
                break
        # asyncpg takes SSL through connect_args, not libpq query params
        if url.startswith("postgresql+asyncpg://"):
            url = url.split("?", 1)[0]
        return url

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def migration_database_url(self) -> str:
        """Synchronous URL for Alembic."""
        return self.database_url.replace("+asyncpg", "+psycopg2").replace("+aiosqlite", "")

    # Auth / JWT
    jwt_secret_key: str  # Required - no default, must be set in .env
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Google OAuth
    google_client_id: str = ""

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Set to true when frontend and backend are on different domains
    cookie_cross_domain: bool = False

    # Anthropic API (chat, documents, suggestions, course plans)
    anthropic_api_key: str = ""
    llm_max_tokens: int = 4000
    llm_title_max_tokens: int = 60
    chat_max_steps: int = 5

    # OpenAI API (image artifacts only)
    openai_api_key: str | None = None
    image_model: str = "dall-e-3"
    image_size: str = "1024x1024"

    # Generation limits
    max_suggestions: int = 5
    chat_title_max_chars: int = 80

    # Weather tool
    weather_api_url: str = "https://api.open-meteo.com/v1/forecast"
    weather_timeout_seconds: float = 10.0

    # Secondary, process-local copy of profiles and activity counters
    profile_cache_dir: str = ".amigo-cache"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def sanitize_error(error: Exception, *, generic_message: str = "An internal error occurred.") -> str:
    """
    Return a user-safe error message.

    In development, returns the full exception string for debugging.
    In staging/production, returns a generic message to avoid leaking internals.
    """
    settings = get_settings()
    if settings.environment == "development":
        return str(error)
    return generic_message
