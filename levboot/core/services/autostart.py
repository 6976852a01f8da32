"""
Autostart registrar — guard script plus a shell startup hook.

The guard script starts the bot only when it is not already running,
through pm2 when available, otherwise with a detached ``nohup``. The
startup file (``~/.bashrc``) gets a marker line and one launch line;
the marker is what makes the hook idempotent.
"""

from __future__ import annotations

import logging
import shlex
from pathlib import Path

from levboot.core.models.settings import AutostartSettings
from levboot.core.persistence.files import atomic_write_text

logger = logging.getLogger(__name__)

GUARD_MODE = 0o755


def render_guard_script(install_dir: Path, settings: AutostartSettings) -> str:
    """Guard script body for an app installed in ``install_dir``."""
    app_dir = shlex.quote(str(install_dir))
    pattern = shlex.quote(settings.process_pattern)
    name = shlex.quote(settings.pm2_name)
    return f"""#!/usr/bin/env bash
# Levanter autorun helper: starts the bot once, never twice.
cd {app_dir} || exit 0

if pgrep -f {pattern} >/dev/null 2>&1; then
  exit 0
fi

if command -v pm2 >/dev/null 2>&1; then
  pm2 resurrect >/dev/null 2>&1 || pm2 start npm --name {name} -- start >/dev/null 2>&1 || true
  pm2 save >/dev/null 2>&1 || true
else
  nohup {settings.start_command} >/dev/null 2>&1 &
fi
"""


def write_guard_script(path: Path, content: str) -> bool:
    """Write the guard script with mode 0755.

    Returns:
        True if the file content changed.
    """
    changed = not path.is_file() or path.read_text(encoding="utf-8") != content
    atomic_write_text(path, content, mode=GUARD_MODE)
    return changed


def hook_block(marker: str, script: Path) -> str:
    return f"\n{marker}\nbash {shlex.quote(str(script))} >/dev/null 2>&1 &\n"


def hook_installed(startup_file: Path, marker: str) -> bool:
    """True if some line of the startup file is exactly ``marker``."""
    if not startup_file.is_file():
        return False
    text = startup_file.read_text(encoding="utf-8", errors="replace")
    return marker in text.splitlines()


def install_hook(startup_file: Path, marker: str, script: Path) -> bool:
    """Append the launch hook unless the marker is already present.

    Returns:
        True if the hook was appended, False if it was already there.
    """
    if hook_installed(startup_file, marker):
        logger.debug("Autostart marker already in %s", startup_file)
        return False
    startup_file.parent.mkdir(parents=True, exist_ok=True)
    with startup_file.open("a", encoding="utf-8") as f:
        f.write(hook_block(marker, script))
    logger.info("Added autostart hook to %s", startup_file)
    return True
