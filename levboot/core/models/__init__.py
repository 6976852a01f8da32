"""
Domain models — pydantic types for the installer.

    from levboot.core.models import Action, Receipt, Phase, InstallerConfig
"""

from levboot.core.models.action import Action, Receipt
from levboot.core.models.settings import AutostartSettings, InstallerConfig
from levboot.core.models.step import FailurePolicy, Phase, StepResult

__all__ = [
    "Action",
    "AutostartSettings",
    "FailurePolicy",
    "InstallerConfig",
    "Phase",
    "Receipt",
    "StepResult",
]
