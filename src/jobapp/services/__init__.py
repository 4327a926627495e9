from .application_service import ApplicationService
from .auth_service import AuthService
from .work_service import WorkService

__all__ = ["ApplicationService", "AuthService", "WorkService"]
