"""
Action and Receipt models — the contract between steps and tools.

A step asks an adapter to do something by handing it an Action.
The adapter answers with a Receipt. Adapters never raise: a tool
that is missing, exits non-zero, or blows up inside Python all come
back as a Receipt with status='failed'.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Action(BaseModel):
    """A single request to an external tool.

    The id doubles as the lookup key for canned responses in the
    mock adapter, so steps build ids deterministically, e.g.
    ``pkg:install:git`` or ``node:install:yarn``.
    """

    id: str                         # e.g. "git:clone"
    adapter: str                    # which adapter handles this
    params: dict[str, Any] = Field(default_factory=dict)
    cwd: str | None = None          # working directory (None = inherit)


class Receipt(BaseModel):
    """Outcome of one adapter call."""

    adapter: str
    action_id: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None
    return_code: int | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def diagnostic(self) -> str:
        """Best text to show a human when this receipt failed."""
        if self.error:
            return self.error
        if self.output:
            return self.output
        if self.return_code is not None:
            return f"exit code {self.return_code}"
        return ""

    @classmethod
    def success(
        cls,
        adapter: str,
        action_id: str,
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        return cls(
            adapter=adapter,
            action_id=action_id,
            status="ok",
            output=output,
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        adapter: str,
        action_id: str,
        error: str,
        **kwargs: Any,
    ) -> Receipt:
        return cls(
            adapter=adapter,
            action_id=action_id,
            status="failed",
            error=error,
            **kwargs,
        )

    @classmethod
    def skip(
        cls,
        adapter: str,
        action_id: str,
        reason: str = "",
        **kwargs: Any,
    ) -> Receipt:
        return cls(
            adapter=adapter,
            action_id=action_id,
            status="skipped",
            output=reason,
            **kwargs,
        )
