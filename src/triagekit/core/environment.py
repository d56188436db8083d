"""Host environment capability.

Everything the resolver and orchestrator read from the running host
(identity, hostname, media root, elevation, clock) goes through
EnvironmentContext so tests can substitute fixed values.
"""

import getpass
import os
import platform
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


def local_now() -> datetime:
    """Timezone-aware local wall-clock time."""
    return datetime.now().astimezone()


def is_elevated() -> bool:
    """Check whether the current process has administrative rights."""
    if os.name == "nt":
        import ctypes

        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except (AttributeError, OSError):
            return False
    return hasattr(os, "geteuid") and os.geteuid() == 0


def detect_media_root(start: Path | None = None) -> Path:
    """Find the root of the volume the program is running from.

    Args:
        start: Path on the removable media (defaults to the working directory)

    Returns:
        Volume root, e.g. ``E:\\`` on Windows
    """
    anchor = Path(start or Path.cwd()).resolve().anchor
    return Path(anchor) if anchor else Path.cwd()


def media_identifier(root: Path) -> str:
    """Short identifier for a media root (drive letter, or the path itself)."""
    return root.drive or str(root)


def _current_user() -> str | None:
    try:
        return getpass.getuser() or None
    except (KeyError, OSError, ImportError):
        return None


@dataclass(frozen=True)
class EnvironmentContext:
    """Identity and clock of the host the acquisition runs on."""

    hostname: str
    username: str | None
    domain: str | None
    media_root: Path
    elevated: bool
    clock: Callable[[], datetime] = field(default=local_now, compare=False, repr=False)

    def now(self) -> datetime:
        """Current time according to the context clock."""
        return self.clock()

    @property
    def media_id(self) -> str:
        """Identifier of the removable media root."""
        return media_identifier(self.media_root)

    @classmethod
    def from_host(cls, media_root: Path | None = None) -> "EnvironmentContext":
        """Build a context from the running host.

        Args:
            media_root: Override for the removable media root

        Returns:
            EnvironmentContext describing this machine
        """
        hostname = os.environ.get("COMPUTERNAME") or platform.node() or "UNKNOWN-HOST"
        return cls(
            hostname=hostname,
            username=_current_user(),
            domain=os.environ.get("USERDOMAIN") or None,
            media_root=Path(media_root) if media_root else detect_media_root(),
            elevated=is_elevated(),
        )
