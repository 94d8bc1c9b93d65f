"""Settings loaded from ROSTER_* environment variables (or a local .env)."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RosterConfig(BaseSettings):
    """Parser and export settings.

    For local development put overrides in a .env file, e.g.
    ROSTER_SECTION_PROGRAMS='["BSIT","BSCS","BSIS","BSBA","BSEMC"]'.
    """

    section_programs: list[str] = Field(
        default=["BSIT", "BSCS", "BSIS", "BSBA"],
        description="Program prefixes recognised in section codes (BSIT-4D)",
    )
    default_department: str = Field(
        default="BSIT",
        description="Department used when neither section nor course code gives one",
    )
    timezone: str = Field(
        default="Asia/Manila",
        description="Timezone for calendar (ICS) export",
    )

    # Logging
    log_json: bool = Field(default=False, description="Output logs as JSON")
    log_level: str = Field(default="INFO", description="Log level")

    model_config = SettingsConfigDict(
        env_prefix="ROSTER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


_config: RosterConfig | None = None


def get_config() -> RosterConfig:
    """Return the process-wide settings, loading them on first use."""
    global _config
    if _config is None:
        _config = RosterConfig()
    return _config
