"""Case workspace (output folder) creation."""

from datetime import datetime
from pathlib import Path, PurePath

CASE_PREFIX = "CASE"


def workspace_name(hostname: str, now: datetime) -> str:
    """Folder name for a run, ``CASE-<YYYYMMDD-HHMM>-<hostname>``."""
    return f"{CASE_PREFIX}-{now:%Y%m%d-%H%M}-{hostname}"


def workspace_path(root: PurePath, hostname: str, now: datetime) -> PurePath:
    """Compute the case folder path without touching the filesystem."""
    return root / workspace_name(hostname, now)


def build(root: Path, hostname: str, now: datetime) -> Path:
    """Create the case folder for a run.

    Two runs on the same host within the same minute share a folder; task
    names, not folders, carry the per-run random suffix.

    Args:
        root: Removable media root
        hostname: Acquired host
        now: Run start time

    Returns:
        Path to the (possibly pre-existing) case folder
    """
    path = Path(workspace_path(Path(root), hostname, now))
    path.mkdir(parents=True, exist_ok=True)
    return path
