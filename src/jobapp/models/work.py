"""Work session models for clock-in/out and breaks."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WorkBreak(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    break_type: str = "other"
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_minutes: Optional[float] = None
    notes: Optional[str] = None


class WorkSession(BaseModel):
    """A clocked-in period of work."""

    model_config = ConfigDict(extra="ignore")

    id: int
    application: Optional[int] = None
    status: str = "active"  # active, on_break, completed, disputed, cancelled
    clock_in_time: Optional[datetime] = None
    clock_out_time: Optional[datetime] = None
    clock_in_verified: bool = False
    clock_out_verified: bool = False
    total_work_minutes: Optional[float] = None
    total_break_minutes: Optional[float] = None
    total_earnings: Optional[float] = None
    employer_confirmed: bool = False
    breaks: List[WorkBreak] = Field(default_factory=list)
    job_title: Optional[str] = None
    company_name: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.status in ("active", "on_break")


class ClockInResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool = True
    session: Optional[WorkSession] = None
    distance_from_job: Optional[float] = None
    is_within_geofence: bool = False
    message: str = ""


class ClockOutResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool = True
    session: Optional[WorkSession] = None
    total_hours: float = 0.0
    total_earnings: float = 0.0
    message: str = ""


class WorkReport(BaseModel):
    """An "on the way" report sent before arriving for a shift."""

    model_config = ConfigDict(extra="ignore")

    id: int
    application: Optional[int] = None
    shift: Optional[int] = None
    status: str = "on_the_way"  # on_the_way, arrived, cancelled
    departure_latitude: Optional[float] = None
    departure_longitude: Optional[float] = None
    estimated_arrival_time: Optional[datetime] = None
    estimated_distance_km: Optional[float] = None
    actual_arrival_time: Optional[datetime] = None
    reported_at: Optional[datetime] = None
    job_title: Optional[str] = None
    company_name: Optional[str] = None
