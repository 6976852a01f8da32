"""
Directory relocation — move an old checkout aside before cloning.

Nothing is deleted: the old directory is renamed to
``<dir>.backup.<unix-seconds>`` (with ``.N`` appended when that name
is taken) and stays there for the user.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

logger = logging.getLogger(__name__)


def backup_path_for(target: Path, now: float | None = None) -> Path:
    """First free ``<target>.backup.<epoch>[.N]`` path."""
    stamp = int(now if now is not None else time.time())
    candidate = target.with_name(f"{target.name}.backup.{stamp}")
    counter = 1
    while candidate.exists():
        candidate = target.with_name(f"{target.name}.backup.{stamp}.{counter}")
        counter += 1
    return candidate


def relocate_directory(target: Path, now: float | None = None) -> Path | None:
    """Rename ``target`` to a fresh backup path.

    Returns:
        The backup path, or None when ``target`` did not exist.

    Raises:
        OSError: If the rename fails; ``target`` is then untouched.
    """
    if not target.exists():
        return None
    backup = backup_path_for(target, now)
    target.rename(backup)
    logger.info("Moved %s to %s", target, backup)
    return backup
