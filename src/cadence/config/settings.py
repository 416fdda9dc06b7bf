"""Centralized configuration.

Loads configuration from a .env file and the environment and provides
typed access to settings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from ..core.time import DEFAULT_REFERENCE_TIMEZONE, resolve_timezone, set_default_timezone

__all__ = [
    "ConfigError",
    "Settings",
    "generate_example_env",
    "get_settings",
    "load_env_file",
    "load_settings",
]

_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


@dataclass
class Settings:
    """Settings for Cadence.

    Attributes
    ----------
    reference_timezone : str
        IANA timezone for week alignment and day keys (default: Asia/Seoul)
    default_week_target : int
        Distinct days per week used when the CLI gets no --target
    log_level : str
        Logging level
    log_dir : Path | None
        Directory for JSONL logs (console only when None)
    """

    reference_timezone: str = DEFAULT_REFERENCE_TIMEZONE
    default_week_target: int = 3
    log_level: str = "INFO"
    log_dir: Path | None = None

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.log_dir and isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)

        try:
            resolve_timezone(self.reference_timezone)
        except ValueError as exc:
            raise ConfigError(
                f"CADENCE_REFERENCE_TZ is not a valid IANA timezone: {self.reference_timezone!r}. "
                "Use a name such as Asia/Seoul or Europe/Brussels"
            ) from exc

        if self.default_week_target < 1:
            raise ConfigError(
                f"CADENCE_WEEK_TARGET must be at least 1, got {self.default_week_target}"
            )

        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ConfigError(
                f"CADENCE_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got {self.log_level!r}"
            )

    @classmethod
    def from_env(cls, env_file: Path | str | None = None) -> Settings:
        """Load settings from environment.

        Loads from .env file if present, otherwise from os.environ.

        Parameters
        ----------
        env_file
            Path to .env file (default: .env in current directory)

        Raises
        ------
        ConfigError
            If settings are invalid
        """
        if env_file is None:
            env_file = Path(".env")
        if isinstance(env_file, str):
            env_file = Path(env_file)

        if env_file.exists():
            load_env_file(env_file)

        try:
            return cls(
                reference_timezone=os.environ.get("CADENCE_REFERENCE_TZ", DEFAULT_REFERENCE_TIMEZONE),
                default_week_target=int(os.environ.get("CADENCE_WEEK_TARGET", "3")),
                log_level=os.environ.get("CADENCE_LOG_LEVEL", "INFO"),
                log_dir=Path(os.environ["CADENCE_LOG_DIR"]) if os.environ.get("CADENCE_LOG_DIR") else None,
            )
        except ValueError as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc


def load_env_file(env_file: Path) -> None:
    """Load environment variables from .env file.

    Existing environment variables win over the file.
    """
    with open(env_file, encoding="utf-8") as f:
        for line in f:
            line = line.strip()

            if not line or line.startswith("#"):
                continue

            if "=" in line:
                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip()

                if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                    value = value[1:-1]

                os.environ.setdefault(key, value)


# Global settings instance
_settings: Settings | None = None


def load_settings(env_file: Path | str | None = None) -> Settings:
    """Load settings and apply the reference timezone.

    Raises
    ------
    ConfigError
        If settings are invalid
    """
    global _settings
    _settings = Settings.from_env(env_file)
    set_default_timezone(_settings.reference_timezone)
    return _settings


def get_settings() -> Settings:
    """Get current settings.

    Raises
    ------
    ConfigError
        If settings not loaded
    """
    if _settings is None:
        raise ConfigError("Settings not loaded. Call load_settings() first.")
    return _settings


def generate_example_env(output_path: Path | None = None) -> str:
    """Generate example .env file with all settings."""
    example = """# Cadence Configuration
# Copy this to .env and adjust values

# Reference timezone for week alignment and day keys (optional, default: Asia/Seoul)
# Never the machine's local zone
CADENCE_REFERENCE_TZ=Asia/Seoul

# Distinct verified days per week when --target is not given (optional, default: 3)
CADENCE_WEEK_TARGET=3

# Log level (optional, default: INFO)
# Options: DEBUG, INFO, WARNING, ERROR, CRITICAL
CADENCE_LOG_LEVEL=INFO

# Directory for JSONL logs (optional, console only if not set)
# CADENCE_LOG_DIR=logs
"""

    if output_path:
        output_path.write_text(example, encoding="utf-8")

    return example
