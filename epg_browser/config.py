from pathlib import Path
import logging

from croniter import croniter
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


class CustomSettings(BaseSettings):
    """Application settings loaded from environment variables.

    Validates configuration at startup to catch misconfiguration early.
    """

    database_path: str = "./data/epg-channels.db"

    upstream_repo: str = "dj1p/epg"
    upstream_branch: str = "master"
    upstream_directory: str = "sites/"
    channel_file_suffix: str = ".channels.xml"
    github_api_url: str = "https://api.github.com"
    raw_base_url: str = "https://raw.githubusercontent.com"
    user_agent: str = "EPG-Browser"

    http_timeout_sec: float = 30.0
    http_max_retries: int = 3
    fetch_batch_size: int = 5
    fetch_batch_pause_sec: float = 1.0  # Pause between batches, not after the last one
    channels_chunk_size: int = 1000

    default_page_limit: int = 100
    max_page_limit: int = 1000

    refresh_cron: str = "0 3 * * *"  # Daily at 3 AM
    refresh_misfire_grace_sec: int = 3600
    scheduler_enabled: bool = True
    refresh_on_startup: bool = True

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, value: str) -> str:
        """Validate database path is accessible."""
        path = Path(value)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            return value
        except (OSError, PermissionError) as exc:
            raise ValueError(f"Cannot access database path '{value}': {exc}") from exc

    @field_validator("github_api_url", "raw_base_url")
    @classmethod
    def validate_base_urls(cls, value: str) -> str:
        """Validate upstream base URLs are HTTP/HTTPS and strip trailing slashes."""
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError(f"Upstream URL must be HTTP/HTTPS: {value}")
        return value.rstrip("/")

    @field_validator("upstream_repo")
    @classmethod
    def validate_upstream_repo(cls, value: str) -> str:
        """Upstream repository must look like 'owner/name'."""
        parts = value.strip("/").split("/")
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"upstream_repo must be 'owner/name', got '{value}'")
        return value.strip("/")

    @field_validator("upstream_directory")
    @classmethod
    def validate_upstream_directory(cls, value: str) -> str:
        """Normalize the top-level directory to end with a slash."""
        value = value.strip("/")
        if not value:
            raise ValueError("upstream_directory must not be empty")
        return f"{value}/"

    @field_validator(
        "http_max_retries",
        "fetch_batch_size",
        "channels_chunk_size",
        "default_page_limit",
        "max_page_limit",
    )
    @classmethod
    def validate_positive_ints(cls, value: int, info) -> int:
        """Ensure integer settings are positive."""
        if value <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return value

    @field_validator("http_timeout_sec")
    @classmethod
    def validate_http_timeout(cls, value: float) -> float:
        """A bounded timeout is required so a stuck request cannot stall a batch."""
        if value <= 0:
            raise ValueError("http_timeout_sec must be > 0")
        return value

    @field_validator("fetch_batch_pause_sec", "refresh_misfire_grace_sec")
    @classmethod
    def validate_non_negative(cls, value, info):
        """Ensure pause and grace values are non-negative."""
        if value < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return value

    @field_validator("refresh_cron")
    @classmethod
    def validate_cron_expression(cls, value: str) -> str:
        """Validate cron expression is valid."""
        try:
            croniter(value)
            return value
        except (ValueError, KeyError) as exc:
            raise ValueError(f"Invalid cron expression '{value}': {exc}") from exc

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate logging level name."""
        normalized = value.upper()
        allowed = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        if normalized not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return normalized

    @model_validator(mode="after")
    def validate_pagination_limits(self):
        """Validate cross-field configuration."""
        if self.default_page_limit > self.max_page_limit:
            raise ValueError("default_page_limit must be <= max_page_limit")
        return self

    def __init__(self, **data):
        """Initialize settings and log configuration."""
        super().__init__(**data)

        logger.info("Configuration loaded:")
        logger.info("  Database: %s", self.database_path)
        logger.info(
            "  Upstream: %s@%s (%s*%s)",
            self.upstream_repo,
            self.upstream_branch,
            self.upstream_directory,
            self.channel_file_suffix,
        )
        logger.info(
            "  Fetch Batches: %s files, %.1fs pause",
            self.fetch_batch_size,
            self.fetch_batch_pause_sec,
        )
        logger.info(
            "  HTTP: timeout=%.1fs, retries=%s",
            self.http_timeout_sec,
            self.http_max_retries,
        )
        logger.info(
            "  Refresh Schedule: %s (%s)",
            self.refresh_cron,
            "enabled" if self.scheduler_enabled else "disabled",
        )
        logger.info("  Refresh On Startup: %s", self.refresh_on_startup)
        logger.info(
            "  Page Limit: default=%s, max=%s",
            self.default_page_limit,
            self.max_page_limit,
        )


settings = CustomSettings()


def setup_logging(level: str | None = None) -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
