"""
Adapter base — the contract between steps and external tools.

Steps never call subprocess directly; they hand an Action to the
registry, which routes it to the adapter named in ``action.adapter``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from levboot.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """What an adapter gets to work with for one call."""

    action: Action
    env: dict[str, str] = Field(default_factory=dict)

    @property
    def params(self) -> dict[str, Any]:
        return self.action.params

    @property
    def working_dir(self) -> str | None:
        return self.action.cwd


class Adapter(ABC):
    """Abstract base class for all adapters.

    Adapters perform external side effects and return receipts.
    They NEVER raise: failures are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Adapter identifier used in ``Action.adapter``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying tool is on PATH. Fast, never raises."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check the action's params before running it.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Run the action and return a receipt. MUST never raise."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
