"""
Atomic file writes.

Every file the installer owns (config.env, the guard script,
package.json edits) is written through here: temp file in the same
directory, then rename. A crash or Ctrl-C leaves either the previous
complete file or the next one, never half of each.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def atomic_write_text(path: Path, content: str, mode: int | None = None) -> None:
    """Replace ``path`` with ``content`` atomically.

    Args:
        path: Target file. Parent directories are created.
        content: Full new file content.
        mode: Optional permission bits applied before the rename.
            When None, an existing file keeps its current mode.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    if mode is None and path.exists():
        mode = path.stat().st_mode & 0o7777

    fd, tmp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}_",
        suffix=".tmp",
    )
    tmp = Path(tmp_path)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        if mode is not None:
            tmp.chmod(mode)
        tmp.replace(path)
        logger.debug("Wrote %s (%d bytes)", path, len(content))
    except Exception:
        tmp.unlink(missing_ok=True)
        raise
