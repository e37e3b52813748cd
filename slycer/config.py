"""
slycer.config - Run configuration, YAML defaults and CLI merging.

Builds the immutable RunConfig from command-line flags, optionally layered
over defaults read from a slycer.yaml file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from slycer.exceptions import ConfigError

CONFIG_FILENAME = "slycer.yaml"

RESERVED_SEPARATORS = set('/\\:*?"<>|')


class RunConfig(BaseModel):
    """Resolved, read-only configuration for one slycer run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    output: Path = Path("out.mp3")
    audio_format: str = "mp3"
    dest: Path | None = None
    keep: bool = False
    auto_install: bool = False

    prefix: str | None = None
    prefix_name: bool = False
    numbers: bool = False

    min_track_seconds: float = Field(default=1.0, ge=0.0)
    separator: str = "_"

    @field_validator("audio_format")
    @classmethod
    def validate_audio_format(cls, v: str) -> str:
        v = v.strip().lstrip(".").lower()
        if not v or not v.isalnum():
            raise ValueError("audio_format must be a plain extension such as mp3 or m4a")
        return v

    @field_validator("separator")
    @classmethod
    def validate_separator(cls, v: str) -> str:
        if len(v) != 1 or v in RESERVED_SEPARATORS or not v.isprintable():
            raise ValueError("separator must be a single filename-safe character")
        return v

    @property
    def track_dir(self) -> Path:
        """Directory split tracks are written to."""
        return self.dest if self.dest is not None else Path(".")


def find_config_file(directory: Path | None = None) -> Path | None:
    """Return slycer.yaml in *directory* (default: cwd) if it exists."""
    candidate = (directory or Path.cwd()) / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def load_config_file(path: Path) -> dict[str, Any]:
    """Read RunConfig defaults from a YAML file.

    Keys may use dashes or underscores (``audio-format`` or ``audio_format``).

    Raises:
        ConfigError: If the file is unreadable, not a mapping, or has unknown keys
    """
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    values = {str(key).replace("-", "_"): value for key, value in raw.items()}
    unknown = sorted(set(values) - set(RunConfig.model_fields))
    if unknown:
        raise ConfigError(f"Unknown config keys in {path}: {', '.join(unknown)}")
    return values


def merge_config(cli_values: dict[str, Any], file_values: dict[str, Any]) -> dict[str, Any]:
    """Merge CLI values over file defaults. CLI values of None are ignored."""
    merged = file_values.copy()
    for key, value in cli_values.items():
        if value is not None:
            merged[key] = value
    return merged


def build_config(
    cli_values: dict[str, Any],
    config_path: Path | None = None,
) -> RunConfig:
    """Create the RunConfig for a run.

    Args:
        cli_values: Values from command-line flags, None meaning "not given"
        config_path: Optional YAML file with defaults

    Raises:
        ConfigError: If the config file or the merged values are invalid
    """
    file_values = load_config_file(config_path) if config_path else {}
    merged = merge_config(cli_values, file_values)
    try:
        return RunConfig(**merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
