"""
impmon Configuration Module.

Centralizes all configuration settings using Pydantic Settings.
Requires Python 3.11+.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Annotated, Any

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Third-party install directories are never tracked unless the user resets the ignore list
DEFAULT_IGNORE_PATTERN = r"[\\/](?:site|dist)-packages[\\/]"


class ReloadSettings(BaseSettings):
    """Hot-reload defaults, restored whenever impmon is asked to import itself."""

    model_config = SettingsConfigDict(env_prefix="IMPMON_")

    timeout_ms: int = Field(
        default=2000, ge=0, description="Cooldown after an accepted change, in milliseconds"
    )
    debug: bool = Field(default=False, description="Emit internal diagnostics")
    console: bool = Field(default=False, description="Log tracked imports and reloads")
    reload_children: bool = Field(
        default=False, description="Re-execute already-cached children of tracked modules"
    )

    ignore_patterns: Annotated[list[str], NoDecode] = Field(
        default=[DEFAULT_IGNORE_PATTERN],
        description="Regular expressions for paths that are never tracked",
    )

    @field_validator("ignore_patterns", mode="before")
    @classmethod
    def parse_ignore_patterns(cls, v: str | list[str]) -> list[str]:
        """Parse ignore patterns from comma-separated string or list."""
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="console")  # "json" or "console"


class Settings(BaseSettings):
    """Main settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="impmon")
    app_version: str = Field(default="0.1.0")

    reload: ReloadSettings = Field(default_factory=ReloadSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings.

    The .env file is loaded into os.environ first so the nested
    settings classes can read its values.
    """
    load_dotenv()
    return Settings()


@dataclass
class RuntimeConfig:
    """
    Mutable process-wide reload configuration.

    Every field is settable on its own; reset() restores the values
    the record was seeded with.
    """

    timeout_ms: int
    debug: bool
    console: bool
    reload_children: bool
    defaults: ReloadSettings = field(repr=False)

    @classmethod
    def from_settings(cls, settings: ReloadSettings) -> "RuntimeConfig":
        config = cls(
            timeout_ms=0, debug=False, console=False, reload_children=False, defaults=settings
        )
        config.reset()
        return config

    def reset(self) -> None:
        """Restore every field to its default."""
        self.timeout_ms = self.defaults.timeout_ms
        self.debug = self.defaults.debug
        self.console = self.defaults.console
        self.reload_children = self.defaults.reload_children


class WatchOptions(BaseModel):
    """Options accepted by watch(); unset fields leave the configuration alone."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    ignore: list[Any] | None = None
    debug: bool | None = None
    console: bool | None = None
    timeout: int | None = Field(default=None, ge=0)
    reload_children: bool | None = None

    @classmethod
    def coerce(
        cls, options: "WatchOptions | dict[str, Any] | None", overrides: dict[str, Any]
    ) -> "WatchOptions":
        """Merge an options record (or mapping) with keyword overrides."""
        if isinstance(options, WatchOptions):
            data = options.model_dump(exclude_unset=True)
        else:
            data = dict(options or {})
        data.update(overrides)
        return cls.model_validate(data)
