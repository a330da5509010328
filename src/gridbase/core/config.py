"""GridBase settings.

Values come from ``GRIDBASE_*`` environment variables or a ``.env`` file and
are validated once, when ``get_settings`` first builds them.
"""

from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["development", "production", "testing"]


class Settings(BaseSettings):
    """Runtime configuration for the API server, the CLI and the table engine."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GRIDBASE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Service
    app_name: str = "GridBase"
    app_version: str = "0.1.0"
    environment: Environment = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    # Storage
    database_url: str = "sqlite+aiosqlite:///./gb_data/gridbase.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # CORS
    cors_origins: list[str] = Field(default=["http://localhost:3000", "http://localhost:5173"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Table engine
    default_timezone: str = Field(
        default="UTC",
        description="IANA timezone used to read local dates before normalizing to UTC",
    )
    export_date_format: str = Field(
        default="%m/%d/%Y",
        description="strftime pattern for date cells in CSV exports",
    )
    min_column_width: int = Field(default=50, description="Narrowest column width in pixels")
    max_column_width: int = Field(default=2000, description="Widest column width in pixels")
    new_column_name: str = Field(
        default="New Column",
        description="Base name for columns added without a name",
    )
    max_bulk_items: int = Field(default=500, ge=1, description="Most items per bulk request")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Accept a comma-separated string in place of a list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("default_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone '{v}'") from e
        return v

    @model_validator(mode="after")
    def check_consistency(self) -> "Settings":
        """Reject combinations that cannot work at runtime."""
        if self.workers > 1 and self.database_url.startswith("sqlite"):
            raise ValueError(
                "SQLite does not support multiple worker processes "
                f"(workers={self.workers}); use workers=1 or PostgreSQL."
            )
        if self.min_column_width < 1 or self.max_column_width < self.min_column_width:
            raise ValueError(
                "Column width bounds are invalid: "
                f"min={self.min_column_width}, max={self.max_column_width}"
            )
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        return self.environment == "testing"

    @property
    def timezone(self) -> ZoneInfo:
        """``default_timezone`` as a tzinfo."""
        return ZoneInfo(self.default_timezone)


@lru_cache
def get_settings() -> Settings:
    """Build the settings once per process and reuse them."""
    return Settings()
