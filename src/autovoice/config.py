"""Central configuration management using pydantic-settings.

All configuration is loaded from environment variables with sensible defaults.
Create a .env file for local development (see .env.example). The only
required value is SERVER_ROOT, the externally reachable root that playback
URLs in generated feeds are built from.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from autovoice.errors import ConfigurationError


class TTSSettings(BaseSettings):
    """Text-to-speech provider configuration."""

    model_config = SettingsConfigDict(env_prefix="TTS_")

    provider: Literal["placeholder", "http"] = Field(
        default="placeholder", description="TTS backend to synthesize with"
    )
    default_voice_id: str = Field(default="Brian", description="Voice used when none is given")
    endpoint: str | None = Field(default=None, description="Synthesis endpoint for the http provider")
    api_key: str | None = Field(default=None, description="API key sent to the http provider")
    audio_format: Literal["mp3", "ogg", "wav"] = Field(default="mp3", description="Audio format tag")
    placeholder_duration: int = Field(
        default=10, description="Duration reported when real measurement is unavailable"
    )
    request_timeout_seconds: float = Field(default=60.0, description="HTTP timeout for synthesis calls")


class PipelineSettings(BaseSettings):
    """Feed transformation pipeline configuration."""

    model_config = SettingsConfigDict(env_prefix="PIPELINE_")

    synthesis_timeout_seconds: float = Field(default=60.0, description="Per-entry synthesis timeout")
    deadline_seconds: float = Field(default=300.0, description="Overall deadline for one feed")
    cache_max_items: int = Field(
        default=1000, ge=0, description="Max cached audio items (0 means unbounded)"
    )
    fetch_timeout_seconds: float = Field(default=30.0, description="Upstream feed fetch timeout")


class FeedSettings(BaseSettings):
    """Metadata for the generated podcast feed."""

    model_config = SettingsConfigDict(env_prefix="FEED_")

    title: str = Field(default="Automated Voices", description="Podcast feed title")
    description: str = Field(
        default=(
            "A Podcast/RSS feed of automated voices of FT articles, "
            "based on an RSS feed of article content"
        ),
        description="Podcast feed description",
    )


class ContentSettings(BaseSettings):
    """Content API (CAPI/SAPI) configuration."""

    model_config = SettingsConfigDict(env_prefix="CAPI_")

    key: str | None = Field(default=None, description="Content API key")
    content_url: str = Field(
        default="http://api.ft.com/enrichedcontent/", description="Enriched content endpoint"
    )
    search_url: str = Field(
        default="http://api.ft.com/content/search/v1", description="Search endpoint"
    )
    timeout_seconds: float = Field(default=30.0, description="HTTP timeout for content calls")


class Settings(BaseSettings):
    """Main application settings aggregating all config sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    server_root: str = Field(description="Externally reachable root used for playback URLs")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    # Sub-configurations
    tts: TTSSettings = Field(default_factory=TTSSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    feed: FeedSettings = Field(default_factory=FeedSettings)
    content: ContentSettings = Field(default_factory=ContentSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings loaded from environment.

    Raises:
        ConfigurationError: If SERVER_ROOT (or any other value) is missing or invalid.
    """
    try:
        return Settings()
    except ValidationError as e:
        missing = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise ConfigurationError(
            f"Invalid configuration ({', '.join(missing)}); SERVER_ROOT must be set in env"
        ) from e
