"""
Work Service - clock in/out, work sessions, breaks, reports to work
"""
import logging
from typing import Any, Dict, List, Optional

from ..api.client import ApiClient
from ..api.errors import ApiError, ErrorKind
from ..models.work import ClockInResult, ClockOutResult, WorkBreak, WorkReport, WorkSession
from ..utils.location import Coordinates
from .application_service import unwrap_list

logger = logging.getLogger(__name__)

BREAK_TYPES = ("lunch", "rest", "prayer", "personal", "other")


def _as_dict(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ApiError(ErrorKind.SERVER, f"The server returned an unexpected {what} response.")
    return data


def _member(data: Any, key: str, what: str) -> Dict[str, Any]:
    """Return ``data[key]`` as a dict or raise a server error naming the operation."""
    value = _as_dict(data, what).get(key)
    if not isinstance(value, dict):
        raise ApiError(ErrorKind.SERVER, f"The server returned an unexpected {what} response.")
    return value


class WorkService:
    """Service for work sessions against the /work/ endpoints.

    Response bodies that lack the expected object surface as
    ``ApiError(ErrorKind.SERVER)`` like every other failed call.
    """

    def __init__(self, client: ApiClient):
        self.client = client

    def get_active_session(self) -> Optional[WorkSession]:
        data = self.client.get("/work/sessions/active/")
        if data is None:
            return None
        session = _as_dict(data, "active session").get("active_session")
        return WorkSession.model_validate(session) if session else None

    def clock_in(
        self,
        application_id: int,
        location: Coordinates,
        shift_id: Optional[int] = None,
    ) -> ClockInResult:
        payload: Dict[str, Any] = {
            "application_id": application_id,
            "latitude": location.latitude,
            "longitude": location.longitude,
        }
        if shift_id is not None:
            payload["shift_id"] = shift_id
        data = self.client.post("/work/sessions/clock_in/", payload)
        result = ClockInResult.model_validate(_as_dict(data, "clock-in"))
        logger.info(
            f"Clocked in for application {application_id} "
            f"(within geofence: {result.is_within_geofence})"
        )
        return result

    def clock_out(self, session_id: int, location: Coordinates) -> ClockOutResult:
        payload = {
            "session_id": session_id,
            "latitude": location.latitude,
            "longitude": location.longitude,
        }
        data = self.client.post("/work/sessions/clock_out/", payload)
        result = ClockOutResult.model_validate(_as_dict(data, "clock-out"))
        logger.info(f"Clocked out of session {session_id} after {result.total_hours} hours")
        return result

    def start_break(self, session_id: int, break_type: str = "other", notes: Optional[str] = None) -> WorkBreak:
        if break_type not in BREAK_TYPES:
            raise ValueError(f"Unknown break type: {break_type}")
        payload: Dict[str, Any] = {"break_type": break_type}
        if notes:
            payload["notes"] = notes
        data = self.client.post(f"/work/sessions/{session_id}/start_break/", payload)
        return WorkBreak.model_validate(_member(data, "break", "start break"))

    def end_break(self, session_id: int) -> WorkBreak:
        data = self.client.post(f"/work/sessions/{session_id}/end_break/")
        return WorkBreak.model_validate(_member(data, "break", "end break"))

    def get_work_history(self) -> List[WorkSession]:
        data = self.client.get("/work/sessions/history/")
        if data is None:
            return []
        sessions = _as_dict(data, "work history").get("sessions") or []
        return [WorkSession.model_validate(item) for item in sessions]

    def get_session(self, session_id: int) -> WorkSession:
        return WorkSession.model_validate(
            _as_dict(self.client.get(f"/work/sessions/{session_id}/"), "work session")
        )

    def confirm_session(self, session_id: int, confirmed: bool, notes: Optional[str] = None) -> WorkSession:
        """Employer confirmation (or dispute) of a completed session."""
        payload: Dict[str, Any] = {"confirmed": confirmed}
        if notes:
            payload["notes"] = notes
        data = self.client.post(f"/work/sessions/{session_id}/employer_confirm/", payload)
        return WorkSession.model_validate(_member(data, "session", "session confirmation"))

    def report_to_work(
        self,
        application_id: int,
        location: Coordinates,
        shift_id: Optional[int] = None,
        estimated_arrival_minutes: Optional[int] = None,
    ) -> WorkReport:
        """Tell the employer the seeker is on the way, from where and roughly when."""
        payload: Dict[str, Any] = {
            "application_id": application_id,
            "latitude": location.latitude,
            "longitude": location.longitude,
        }
        if shift_id is not None:
            payload["shift_id"] = shift_id
        if estimated_arrival_minutes is not None:
            payload["estimated_arrival_minutes"] = estimated_arrival_minutes
        data = self.client.post("/work/reports/", payload)
        report = WorkReport.model_validate(_member(data, "report", "report to work"))
        logger.info(f"Reported on the way for application {application_id}")
        return report

    def list_my_reports(self) -> List[WorkReport]:
        return [WorkReport.model_validate(item) for item in unwrap_list(self.client.get("/work/reports/"))]
