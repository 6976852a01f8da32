"""
Mock adapter — stands in for an external tool during tests.

Responses are keyed by action id. An id that ends in ``*`` matches
every action id starting with the part before it, so a test can fail
``pkg:install:*`` in one call.
"""

from __future__ import annotations

from levboot.adapters.base import Adapter, ExecutionContext
from levboot.core.models.action import Receipt


class MockAdapter(Adapter):
    """Records every call and answers with canned receipts.

    Unconfigured action ids succeed with ``default_output``.
    """

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._responses: dict[str, Receipt] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        return self._call_log

    @property
    def action_ids(self) -> list[str]:
        """Action ids in the order they were executed."""
        return [ctx.action.id for ctx in self._call_log]

    def calls_for(self, action_id: str) -> list[ExecutionContext]:
        return [ctx for ctx in self._call_log if ctx.action.id == action_id]

    def is_available(self) -> bool:
        return self._available

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._responses[action_id] = receipt

    def set_failure(
        self,
        action_id: str,
        error: str = "Mock failure",
        return_code: int = 1,
    ) -> None:
        self._responses[action_id] = Receipt.failure(
            adapter=self._name,
            action_id=action_id,
            error=error,
            return_code=return_code,
        )

    def _lookup(self, action_id: str) -> Receipt | None:
        if action_id in self._responses:
            return self._responses[action_id]
        for key, receipt in self._responses.items():
            if key.endswith("*") and action_id.startswith(key[:-1]):
                return receipt
        return None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)

        canned = self._lookup(context.action.id)
        if canned is not None:
            return canned.model_copy(update={"action_id": context.action.id}, deep=True)

        return Receipt.success(
            adapter=self._name,
            action_id=context.action.id,
            output=self._default_output,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        self._call_log.clear()
        self._responses.clear()
