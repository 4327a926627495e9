from .rules import ContractPhase
from .view import ActionResult, ApplicationLifecycleView, TrackedApplication

__all__ = ["ActionResult", "ApplicationLifecycleView", "ContractPhase", "TrackedApplication"]
