"""
Environment prober — which tools does this device have?

Probing is a PATH lookup and never fails the run. Results are cached
per tool; ``refresh`` re-probes one tool after a step installed it.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# ── Tools the installer cares about ─────────────────────────────

TOOLS: list[dict[str, str]] = [
    {"id": "pkg", "label": "Termux pkg"},
    {"id": "apt-get", "label": "apt-get"},
    {"id": "git", "label": "Git"},
    {"id": "node", "label": "Node.js"},
    {"id": "npm", "label": "npm"},
    {"id": "yarn", "label": "Yarn"},
    {"id": "pm2", "label": "pm2"},
    {"id": "pgrep", "label": "pgrep"},
    {"id": "termux-setup-storage", "label": "Termux storage helper"},
    {"id": "termux-wake-lock", "label": "Termux wake lock"},
    {"id": "termux-wake-unlock", "label": "Termux wake unlock"},
]


@dataclass(frozen=True)
class CapabilityFlag:
    tool: str
    present: bool
    path: str | None = None

    def to_dict(self) -> dict:
        return {"tool": self.tool, "present": self.present, "path": self.path}


class EnvironmentProber:
    """Cached tool detection.

    ``which`` is injectable so tests can describe a device without
    touching PATH.
    """

    def __init__(self, which: Callable[[str], str | None] = shutil.which):
        self._which = which
        self._flags: dict[str, CapabilityFlag] = {}

    def flag(self, tool: str) -> CapabilityFlag:
        if tool not in self._flags:
            try:
                path = self._which(tool)
            except OSError as e:
                logger.debug("Probe for %s failed: %s", tool, e)
                path = None
            self._flags[tool] = CapabilityFlag(tool=tool, present=path is not None, path=path)
            logger.debug("Probed %s: %s", tool, path or "absent")
        return self._flags[tool]

    def probe(self, tool: str) -> bool:
        return self.flag(tool).present

    def refresh(self, tool: str) -> bool:
        self._flags.pop(tool, None)
        return self.probe(tool)

    def probe_all(self) -> list[CapabilityFlag]:
        return [self.flag(t["id"]) for t in TOOLS]

    # ── Alternate-path choices ──────────────────────────────────

    def package_manager(self) -> str | None:
        """``pkg`` on Termux, ``apt-get`` elsewhere, None if neither."""
        for manager in ("pkg", "apt-get"):
            if self.probe(manager):
                return manager
        return None

    def node_installer(self) -> str | None:
        """Preferred project dependency installer: yarn, then npm."""
        for installer in ("yarn", "npm"):
            if self.probe(installer):
                return installer
        return None
