"""
Data models for the job marketplace client.
"""

from .application import (
    Application,
    ApplicationStatus,
    ApplicationType,
    ContractTerms,
    JobSummary,
    ShiftDetails,
)
from .user import Profile, User
from .work import ClockInResult, ClockOutResult, WorkBreak, WorkReport, WorkSession

__all__ = [
    "Application",
    "ApplicationStatus",
    "ApplicationType",
    "ContractTerms",
    "JobSummary",
    "ShiftDetails",
    "Profile",
    "User",
    "ClockInResult",
    "ClockOutResult",
    "WorkBreak",
    "WorkReport",
    "WorkSession",
]
