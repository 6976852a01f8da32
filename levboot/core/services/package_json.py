"""
package.json sanitizing — drop dependencies that cannot build on-device.

sqlite3 ships a native addon with no prebuilt binary for Android; with
``--ignore-scripts`` it would install half-broken, so the safe profile
removes it before installing.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from levboot.core.persistence.files import atomic_write_text

logger = logging.getLogger(__name__)

DEPENDENCY_SECTIONS = (
    "dependencies",
    "devDependencies",
    "optionalDependencies",
    "peerDependencies",
)


def strip_dependencies(manifest: dict[str, Any], names: list[str]) -> list[str]:
    """Remove ``names`` from every dependency section, in place.

    Returns:
        ``section:name`` for each removed entry.
    """
    removed = []
    for section in DEPENDENCY_SECTIONS:
        deps = manifest.get(section)
        if not isinstance(deps, dict):
            continue
        for name in names:
            if name in deps:
                del deps[name]
                removed.append(f"{section}:{name}")
    return removed


def sanitize_package_json(path: Path, names: list[str]) -> list[str]:
    """Strip ``names`` from ``path``. Untouched when nothing matches.

    Raises:
        ValueError: If the file is not a JSON object.
        OSError: On read/write errors.
    """
    manifest = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(manifest, dict):
        raise ValueError(f"{path} is not a JSON object")

    removed = strip_dependencies(manifest, names)
    if removed:
        atomic_write_text(path, json.dumps(manifest, indent=2, ensure_ascii=False) + "\n")
        logger.info("Removed %s from %s", ", ".join(removed), path)
    return removed
