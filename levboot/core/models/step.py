"""
Step models — phases, failure policies, and per-step results.

The orchestrator is a straight line of phases with one exit ramp:

    INIT → PROBING → INSTALLING → CLONING → CONFIGURING_DEPS
         → CONFIGURING → REGISTERING_AUTOSTART → DONE
                           ↘ FATAL (from any fatal step)

Phases are ordered; a step may never belong to an earlier phase
than the step before it.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel


class Phase(str, Enum):
    """Orchestrator phase. Declaration order is execution order."""

    INIT = "init"
    PROBING = "probing"
    INSTALLING = "installing"
    CLONING = "cloning"
    CONFIGURING_DEPS = "configuring_deps"
    CONFIGURING = "configuring"
    REGISTERING_AUTOSTART = "registering_autostart"
    DONE = "done"
    FATAL = "fatal"

    @property
    def rank(self) -> int:
        return _PHASE_ORDER.index(self)


_PHASE_ORDER: list[Phase] = list(Phase)


class FailurePolicy(str, Enum):
    """What a failed step does to the run."""

    FATAL = "fatal"   # halt, report, non-zero exit
    WARN = "warn"     # record a warning, continue with the next step


class StepResult(BaseModel):
    """Recorded outcome of one step in a run."""

    step: str
    phase: Phase
    status: Literal["ok", "skipped", "warned", "failed"]
    detail: str = ""
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.status in ("ok", "skipped")
