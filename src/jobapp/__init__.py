"""
Client library for the job marketplace application lifecycle.
"""

from .app import create_lifecycle_view
from .lifecycle import ActionResult, ApplicationLifecycleView, ContractPhase
from .models import Application, ApplicationStatus

__all__ = [
    "create_lifecycle_view",
    "ActionResult",
    "ApplicationLifecycleView",
    "ContractPhase",
    "Application",
    "ApplicationStatus",
]
