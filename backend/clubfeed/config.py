from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from clubfeed.core.errors import ConfigurationError
from clubfeed.schemas.club import ClubConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        json_file="config.json",
        extra="ignore",
    )

    # App
    app_name: str = "ClubFeed"
    app_env: str = "development"

    # Strava
    strava_token: str = Field(min_length=1)
    strava_clubs: list[ClubConfig] = Field(min_length=1)

    # Polling interval in milliseconds
    activity_check_interval: int = Field(default=300_000, gt=0)

    # Slack
    message_style: Literal["rich", "flat"] = "rich"
    slack_username: str = "Strava"
    slack_icon_url: str | None = None

    # Seen-activity store
    database_url: str = "sqlite+aiosqlite:///./clubfeed.db"

    # Celery broker
    redis_url: str = "redis://localhost:6379/0"

    # Sentry (optional, only set in staging/production)
    sentry_dsn: str = ""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @field_validator("strava_clubs")
    @classmethod
    def _unique_club_ids(cls, clubs: list[ClubConfig]) -> list[ClubConfig]:
        ids = [str(club.id) for club in clubs]
        if len(ids) != len(set(ids)):
            raise ValueError("strava_clubs contains duplicate club ids")
        return clubs

    @field_validator("database_url")
    @classmethod
    def _supported_database(cls, url: str) -> str:
        # The seen-activity store relies on INSERT ... ON CONFLICT DO NOTHING RETURNING
        if not url.startswith(("sqlite", "postgresql")):
            raise ValueError("database_url must be a SQLite or PostgreSQL URL")
        return url

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def log_level(self) -> str:
        return "INFO" if self.is_production else "DEBUG"

    @property
    def activity_check_interval_seconds(self) -> float:
        return self.activity_check_interval / 1000

    def get_club(self, club_id: int | str) -> ClubConfig | None:
        for club in self.strava_clubs:
            if str(club.id) == str(club_id):
                return club
        return None


@lru_cache
def get_settings() -> Settings:
    """Load settings once; invalid or missing configuration is fatal."""
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


# ---------------------------------------------------------------------------
# Application constants (not env-configurable, change in code)
# ---------------------------------------------------------------------------

STRAVA_API_BASE = "https://www.strava.com/api/v3"
STRAVA_WEB_BASE = "https://www.strava.com"

# Max activities requested per club listing
CLUB_ACTIVITIES_PER_PAGE = 200

# Activities that started longer ago than this are never posted
STALE_ACTIVITY_DAYS = 7
