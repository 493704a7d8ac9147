"""Configuration management for songbook."""

from enum import StrEnum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StringFilterThreshold(StrEnum):
    """How much of a typed string filter (lang/genre/year) must match."""

    FULL = "full"  # every character of the filter value found in order
    HALF = "half"  # at least half of the attainable score


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Catalog server
    catalog_base_url: str = Field(default="http://127.0.0.1:8080", description="Song catalog server URL")
    catalog_session_cookie: str | None = Field(
        default=None, description="Session cookie used for custom list mutations (optional)"
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    # Ranking behaviour
    initial_reveal_count: int = Field(default=100, ge=1, description="Number of songs revealed after each search")
    string_filter_threshold: StringFilterThreshold = Field(
        default=StringFilterThreshold.FULL,
        description="Match policy for lang/genre/year filters",
    )

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # HTTP
    API_TIMEOUT_SECONDS: int = 30
    HTTP_ACCEPT: str = "text/csv, application/json;q=0.9"
    SESSION_COOKIE_NAME: str = "id"

    # Catalog API paths
    SONGS_PATH: str = "/api/songs"
    CUSTOM_LISTS_PATH: str = "/api/custom/lists"
    CUSTOM_LIST_PATH: str = "/api/custom/list/{name}"
    CUSTOM_LIST_ENTRY_PATH: str = "/api/custom/list/{name}/{song_hash}"
    SONG_COVER_PATH: str = "/images/songs/{song_hash}.png"

    # Incremental reveal
    SCROLL_THRESHOLD_ROWS: int = 50  # reveal more when fewer rows than this remain below the viewport
    ROW_HEIGHT_PX: int = 48
    SCROLL_RECHECK_MS: int = 32

    # Placeholder autotyper
    AUTOTYPE_INITIAL_DELAY_MS: int = 500
    AUTOTYPE_RESTART_DELAY_MS: int = 100
    AUTOTYPE_TICK_MS: int = 80
    DEFAULT_PLACEHOLDER: str = "Sök"


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
