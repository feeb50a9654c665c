"""Configuration and settings management using pydantic-settings."""
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_SEVERITIES = {"info", "warning", "error"}


class Settings(BaseSettings):
    """Application settings with environment variable loading."""

    model_config = SettingsConfigDict(
        env_prefix="PLUGIN_HOST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Core settings
    env: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(
        default="json",
        description="Log output format: json or text",
    )

    # Corpus layout
    corpus_root: Path = Field(
        default=Path("."),
        description="Root directory of the plugin corpus",
    )
    agents_dir: str = Field(default="agents", description="Agent documents directory")
    skills_dir: str = Field(default="skills", description="Skill directories parent")
    commands_dir: str = Field(default="commands", description="Command documents directory")
    skill_filename: str = Field(
        default="SKILL.md",
        description="File name of the document inside each skill directory",
    )
    manifest_paths: list[str] = Field(
        default_factory=lambda: [".claude-plugin/plugin.json", "plugin.json"],
        description="Candidate manifest locations, first match wins",
    )

    # Lint settings
    known_sasmp_versions: list[str] = Field(
        default_factory=lambda: ["1.3.0", "2.0.0"],
        description="SASMP versions recognised without a warning",
    )
    fail_on: str = Field(
        default="error",
        description="Lowest severity that makes a lint run fail",
    )
    lint_select: list[str] = Field(
        default_factory=list,
        description="Only run these rule ids (empty means all)",
    )
    lint_ignore: list[str] = Field(
        default_factory=list,
        description="Rule ids to skip",
    )

    # Dispatch settings
    trigger_min_score: float = Field(
        default=0.2,
        description="Minimum score for a trigger match to be returned",
    )
    match_limit: int = Field(default=5, description="Default number of matches")

    # Default error handling policy for agents that declare none
    default_max_retries: int = Field(default=3, description="Default retry count")
    default_base_delay_seconds: float = Field(
        default=1.0,
        description="Default first retry delay in seconds",
    )
    default_max_delay_seconds: float = Field(
        default=30.0,
        description="Default cap on retry delay in seconds",
    )

    # API settings
    api_host: str = Field(default="127.0.0.1", description="API bind host")
    api_port: int = Field(default=8000, description="API bind port")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and validate the log level name."""
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return level

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate that the log format is known."""
        fmt = v.lower()
        if fmt not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return fmt

    @field_validator("fail_on")
    @classmethod
    def validate_fail_on(cls, v: str) -> str:
        """Validate that fail_on names a severity."""
        severity = v.lower()
        if severity not in _SEVERITIES:
            raise ValueError(f"fail_on must be one of {sorted(_SEVERITIES)}")
        return severity

    @field_validator("trigger_min_score")
    @classmethod
    def validate_min_score(cls, v: float) -> float:
        """Validate that the score threshold is within [0, 1]."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("trigger_min_score must be between 0 and 1")
        return v

    def resolve_root(self, root: Path | str | None = None) -> Path:
        """
        Resolve the corpus root, preferring an explicit argument.

        Args:
            root: Explicit root, usually from the CLI or the API factory

        Returns:
            Absolute corpus root path
        """
        return Path(root if root is not None else self.corpus_root).resolve()


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    global _settings
    _settings = None
