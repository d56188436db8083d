"""Collector executable discovery on removable media."""

import os
from pathlib import Path

from triagekit.core import logging
from triagekit.core.errors import CollectorNotFoundError

DEFAULT_MAX_DEPTH = 6


def locate(root: Path, filename: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Path:
    """Find ``filename`` under ``root`` within ``max_depth`` directory levels.

    Files directly in ``root`` are at depth 0. Names match case-insensitively.
    When several copies exist the first one in filesystem traversal order is
    returned, so callers must not rely on which duplicate wins. Directories
    that cannot be listed are skipped.

    Args:
        root: Directory to search
        filename: Executable name, e.g. ``kape.exe``
        max_depth: Deepest directory level searched

    Returns:
        Path to the first match

    Raises:
        CollectorNotFoundError: If there is no match within the bound
    """
    root = Path(root)
    wanted = filename.lower()

    def _skip(err: OSError) -> None:
        logging.debug("Skipping unreadable directory", path=err.filename, error=err.strerror)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_skip):
        for name in filenames:
            if name.lower() == wanted:
                return Path(dirpath) / name

        depth = len(Path(dirpath).relative_to(root).parts)
        if depth >= max_depth:
            dirnames[:] = []

    raise CollectorNotFoundError(filename, root, max_depth)
