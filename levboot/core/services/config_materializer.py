"""
Config materializer — build the app's config.env from its template.

The template (``config.env.example``) is a flat shell-style env file.
Every ``KEY=value`` line (optionally ``export KEY=value``) declares a
key and its default. The user is asked for each key; empty answers
keep the default. Each answer is upserted into the output so a key is
never written twice, and every write replaces the whole file
atomically.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from levboot.core.persistence.files import atomic_write_text

logger = logging.getLogger(__name__)

KEY_LINE = re.compile(r"^\s*(export\s+)?([A-Za-z_][A-Za-z0-9_]*)=(.*)$")

_QUOTES_AND_SPACE = "\"' \t"


def strip_value(raw: str) -> str:
    """Drop surrounding quotes and whitespace from a template value."""
    return raw.strip(_QUOTES_AND_SPACE)


def parse_template(text: str) -> dict[str, str]:
    """Ordered key → default mapping. The first definition of a key wins."""
    defaults: dict[str, str] = {}
    for line in text.splitlines():
        m = KEY_LINE.match(line)
        if m is None:
            continue
        key = m.group(2)
        if key not in defaults:
            defaults[key] = strip_value(m.group(3))
    return defaults


def upsert_line(text: str, key: str, value: str) -> str:
    """Return ``text`` with exactly one ``key=value`` line.

    The first existing line for ``key`` (with or without ``export``) is
    replaced in place and any later ones are dropped. A missing key is
    appended at the end.
    """
    out: list[str] = []
    replaced = False
    for line in text.splitlines():
        m = KEY_LINE.match(line)
        if m is not None and m.group(2) == key:
            if not replaced:
                out.append(f"{key}={value}")
                replaced = True
            continue
        out.append(line)
    if not replaced:
        out.append(f"{key}={value}")
    return "\n".join(out) + "\n"


def upsert(path: Path, key: str, value: str) -> None:
    current = path.read_text(encoding="utf-8") if path.is_file() else ""
    atomic_write_text(path, upsert_line(current, key, value))


def prompt_text(key: str, default: str) -> str:
    return f"Enter value for {key} (leave empty to keep default: {default})"


@dataclass
class MaterializeResult:
    output: Path
    source: str                      # "template" or "fallback"
    values: dict[str, str] = field(default_factory=dict)
    seeded: bool = False


def materialize(
    template: Path,
    output: Path,
    ask: Callable[[str], str],
    fallback_keys: list[str] | None = None,
) -> MaterializeResult:
    """Write ``output`` from ``template`` plus the user's answers.

    Args:
        template: Path to config.env.example (may be missing).
        output: Path to config.env.
        ask: Called with the prompt text, returns the raw answer.
        fallback_keys: Keys to ask for when there is no template. Only
            non-empty answers are written in that case.
    """
    if not template.is_file():
        logger.info("No template at %s; asking for %s", template, fallback_keys)
        result = MaterializeResult(output=output, source="fallback")
        if not output.exists():
            atomic_write_text(output, "")
            result.seeded = True
        for key in fallback_keys or []:
            value = ask(f"Enter {key} (can be empty)").strip()
            if value:
                upsert(output, key, value)
                result.values[key] = value
        return result

    text = template.read_text(encoding="utf-8")
    defaults = parse_template(text)
    result = MaterializeResult(output=output, source="template")

    if not output.exists():
        atomic_write_text(output, text)
        result.seeded = True
        logger.debug("Seeded %s from %s", output, template)

    for key, default in defaults.items():
        answer = ask(prompt_text(key, default)).strip()
        value = answer or default
        upsert(output, key, value)
        result.values[key] = value

    return result
