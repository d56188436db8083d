"""Acquisition settings.

Settings come from an optional YAML file; every key has a default so an
empty or missing file yields a working configuration::

    collector_filename: kape.exe
    search_depth: 6
    target_profile: "!SANS_Triage"
    stealth: true
    start_delay_seconds: 60
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from triagekit.core.errors import ConfigError

SETTINGS_FILE_NAME = "triagekit.yaml"


class AcquisitionSettings(BaseModel):
    """Tunable parameters for locating, launching and logging the collector."""

    collector_filename: str = Field(default="kape.exe", min_length=1)
    search_depth: int = Field(default=6, ge=0, description="Directory levels searched for the collector")
    source_drive: str = Field(default="C:", description="Volume the collector acquires from")
    target_profile: str = Field(default="!SANS_Triage", description="Collector target profile")
    stealth: bool = Field(default=True, description="Run the collector without its GUI")
    start_delay_seconds: int = Field(default=60, ge=0, description="Delay before the one-shot trigger")
    task_prefix: str = Field(default="KapeTriage", pattern=r"^[A-Za-z0-9_-]+$")
    task_principal: str = Field(default="SYSTEM", description="Identity the scheduled task runs as")
    record_format: Literal["array", "jsonl"] = "array"
    python_executable: str | None = Field(
        default=None, description="Interpreter for the scheduled task (defaults to the current one)"
    )

    model_config = {"extra": "forbid"}


def load_settings(path: Path | None = None, media_root: Path | None = None) -> AcquisitionSettings:
    """Load settings from YAML.

    Args:
        path: Explicit settings file (must exist)
        media_root: Media root searched for ``triagekit.yaml`` when no path is given

    Returns:
        AcquisitionSettings

    Raises:
        ConfigError: If the file is unreadable or invalid
    """
    if path is None:
        if media_root is None:
            return AcquisitionSettings()
        candidate = Path(media_root) / SETTINGS_FILE_NAME
        if not candidate.is_file():
            return AcquisitionSettings()
        path = candidate

    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Settings file not found: {path}", path) from e
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read settings file {path}: {e}", path) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping", path)

    try:
        return AcquisitionSettings(**data)
    except ValidationError as e:
        errors = [f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise ConfigError(f"Invalid settings in {path}: {'; '.join(errors)}", path) from e
