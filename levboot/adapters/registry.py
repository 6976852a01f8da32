"""
Adapter registry — the one door steps use to reach external tools.

Steps build an Action and call ``execute_action``; the registry picks
the adapter named in ``action.adapter``, validates params, and always
hands back a Receipt.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from levboot.adapters.base import Adapter, ExecutionContext
from levboot.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Maps adapter names to adapters and runs actions through them."""

    def __init__(self):
        self._adapters: dict[str, Adapter] = {}

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Replacing adapter: %s", adapter.name)
        self._adapters[adapter.name] = adapter
        logger.debug("Registered adapter: %s", adapter.name)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def adapter_status(self) -> dict[str, dict[str, Any]]:
        """Whether each adapter's underlying tool is on PATH."""
        status = {}
        for name, adapter in self._adapters.items():
            try:
                available = adapter.is_available()
            except Exception:
                logger.debug("is_available() raised for %s", name, exc_info=True)
                available = False
            status[name] = {"available": available, "type": adapter.__class__.__name__}
        return status

    def execute_action(self, action: Action, env: dict[str, str] | None = None) -> Receipt:
        """Validate and run ``action`` through its adapter.

        Never raises: unknown adapters, bad params and adapter crashes
        all come back as failed receipts.
        """
        started = time.monotonic()
        adapter = self._adapters.get(action.adapter)
        if adapter is None:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )

        context = ExecutionContext(action=action, env=env or {})
        try:
            is_valid, problem = adapter.validate(context)
        except Exception as e:
            is_valid, problem = False, f"validate() raised: {e}"
        if not is_valid:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Invalid {action.adapter} action {action.id}: {problem}",
            )

        try:
            receipt = adapter.execute(context)
        except Exception as e:
            logger.error("Adapter %s raised on %s: %s", action.adapter, action.id, e)
            receipt = Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Unexpected error: {e}",
            )

        if not receipt.duration_ms:
            receipt.duration_ms = int((time.monotonic() - started) * 1000)
        logger.debug("%s %s (%s, %dms)", action.adapter, action.id, receipt.status, receipt.duration_ms)
        return receipt
