"""
Run ledger — append-only history of install runs.

Each install appends one JSON line to ``~/.levboot/audit.ndjson``.
Entries are never rewritten; ``levboot history`` reads them back.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_AUDIT_FILE = "audit.ndjson"


class RunRecord(BaseModel):
    """One install run as recorded in the ledger."""

    run_id: str = ""
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    finished_at: str = ""
    profile: str = ""
    install_dir: str = ""

    status: str = ""               # ok, warnings, failed
    exit_code: int = 0
    final_phase: str = ""

    steps_total: int = 0
    steps_ok: int = 0
    steps_skipped: int = 0
    steps_warned: int = 0
    duration_ms: int = 0

    warnings: list[str] = Field(default_factory=list)
    fatal_step: str | None = None
    fatal_message: str | None = None


class AuditWriter:
    """Append-only NDJSON writer for RunRecords."""

    def __init__(self, path: Path | None = None, state_dir: Path | None = None):
        if path is not None:
            self._path = path
        elif state_dir is not None:
            self._path = state_dir / DEFAULT_AUDIT_FILE
        else:
            self._path = Path.home() / ".levboot" / DEFAULT_AUDIT_FILE

    @property
    def path(self) -> Path:
        return self._path

    def write(self, record: RunRecord) -> None:
        """Append a record. Ledger I/O problems are logged, not raised."""
        line = json.dumps(record.model_dump(mode="json"), ensure_ascii=False) + "\n"
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)
            logger.debug("Run record written: %s (%s)", record.run_id, record.status)
        except OSError as e:
            logger.error("Failed to write run record: %s", e)

    def read_all(self) -> list[RunRecord]:
        """All records, oldest first. Corrupt lines are skipped."""
        if not self._path.is_file():
            return []

        records = []
        try:
            with self._path.open("r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        records.append(RunRecord.model_validate(json.loads(line)))
                    except (json.JSONDecodeError, ValidationError) as e:
                        logger.warning("Skipping corrupt run record at line %d: %s", line_num, e)
        except OSError as e:
            logger.error("Failed to read run ledger: %s", e)
        return records

    def read_recent(self, n: int = 10) -> list[RunRecord]:
        if n <= 0:
            return []
        return self.read_all()[-n:]
