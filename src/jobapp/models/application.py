"""Application records as returned by the marketplace API."""

import datetime as dt
from datetime import datetime, time
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator

TIME_FORMATS = ("%H:%M:%S", "%H:%M")


class ApplicationStatus(str, Enum):
    """Lifecycle states, in pipeline order, followed by the absorbing states."""

    PENDING = "pending"
    REVIEWED = "reviewed"
    SHORTLISTED = "shortlisted"
    ACCEPTED = "accepted"
    CONTRACT_SENT = "contract_sent"
    CONTRACT_ACKNOWLEDGED = "contract_acknowledged"
    ACTIVE = "active"
    COMPLETED = "completed"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class ApplicationType(str, Enum):
    APPLY = "apply"
    BID = "bid"


def parse_time_of_day(value: Any) -> Any:
    """Accept "HH:MM" and "HH:MM:SS" strings as well as time objects."""
    if isinstance(value, str):
        for fmt in TIME_FORMATS:
            try:
                return datetime.strptime(value.strip(), fmt).time()
            except ValueError:
                continue
        raise ValueError(f"Invalid time of day: {value!r}")
    return value


class JobSummary(BaseModel):
    """The slice of a job embedded in an application record."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    title: str = ""
    company_name: Optional[str] = None


class ContractTerms(BaseModel):
    model_config = ConfigDict(extra="ignore")

    job_title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    hourly_rate: Optional[float] = None
    schedule: Optional[Any] = None


class ShiftDetails(BaseModel):
    """Shift schedule attached to an application; gates clock-in."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    date: Optional[dt.date] = None
    start_time: time
    end_time: time

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_times(cls, value):
        return parse_time_of_day(value)


class Application(BaseModel):
    """A seeker's application (or bid) for a job."""

    model_config = ConfigDict(extra="ignore")

    id: int
    status: ApplicationStatus
    application_type: ApplicationType = ApplicationType.APPLY
    proposed_rate: Optional[float] = None
    cover_letter: Optional[str] = None
    job: Optional[JobSummary] = None
    contract_terms: Optional[ContractTerms] = None
    seeker_signature: Optional[str] = None
    seeker_signed_at: Optional[datetime] = None
    employer_verified_at: Optional[datetime] = None
    shift_details: Optional[ShiftDetails] = None
    created_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None

    @property
    def job_title(self) -> str:
        if self.job and self.job.title:
            return self.job.title
        if self.contract_terms and self.contract_terms.job_title:
            return self.contract_terms.job_title
        return f"application {self.id}"

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
