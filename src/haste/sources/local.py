from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

from haste.errors import SourceError
from haste.logging_config import get_logger

logger = get_logger(__name__)


def to_object_key(path: str | Path, root: str | Path) -> str:
    """Container-relative key for ``path``: '/' separated, no leading slash."""
    relative = os.path.relpath(path, root)
    return relative.replace(os.sep, "/").lstrip("/")


def _check_root(root: Path) -> None:
    if not root.exists():
        raise SourceError(f"Source directory not found: '{root}'")
    if not root.is_dir():
        raise SourceError(f"Source is not a directory: '{root}'")
    if not os.access(root, os.R_OK | os.X_OK):
        raise SourceError(f"Source directory is not readable: '{root}'")


def _warn_unreadable(error: OSError) -> None:
    logger.warning("Skipping unreadable path: path=%s error=%s", error.filename, error.strerror or error)


def iter_local_keys(root: str | Path) -> Iterator[str]:
    """Yield the key of every non-directory entry below ``root``.

    The root is checked when the call is made, not on first iteration.
    Order follows ``os.walk`` and is not sorted.
    """
    root = Path(root)
    _check_root(root)

    def _walk() -> Iterator[str]:
        for dirpath, _dirnames, filenames in os.walk(root, onerror=_warn_unreadable):
            for filename in filenames:
                yield to_object_key(os.path.join(dirpath, filename), root)

    return _walk()
