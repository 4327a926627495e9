"""Remote operations on job applications."""

import logging
from typing import Any, Dict, List, Optional

from ..api.client import ApiClient
from ..models.application import Application, ApplicationStatus, ApplicationType, ContractTerms

logger = logging.getLogger(__name__)

MY_APPLICATIONS_PATH = "/jobs/applications/my/"
APPLY_PATH = "/jobs/applications/"
JOB_APPLICATIONS_PATH = "/jobs/{job_id}/applications/"
WITHDRAW_PATH = "/applications/{id}/withdraw/"
SIGN_CONTRACT_PATH = "/applications/{id}/sign_contract/"
VERIFY_CONTRACT_PATH = "/applications/{id}/verify_contract/"
SEND_CONTRACT_PATH = "/applications/{id}/send_contract/"
STATUS_PATH = "/applications/{id}/status/"


def unwrap_list(data: Any) -> List[Dict[str, Any]]:
    """Accept a bare array or a paginated ``{"results": [...]}`` object."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("results"), list):
        return data["results"]
    return []


class ApplicationService:
    """Wraps the application endpoints.

    Mutations return the application as reported by the server when the
    response body carries one, otherwise None.
    """

    def __init__(self, client: ApiClient):
        self.client = client

    def list_my_applications(self) -> List[Application]:
        data = self.client.get(MY_APPLICATIONS_PATH)
        return [Application.model_validate(item) for item in unwrap_list(data)]

    def list_job_applications(self, job_id: int) -> List[Application]:
        """Applications received for one of the employer's jobs."""
        data = self.client.get(JOB_APPLICATIONS_PATH.format(job_id=job_id))
        return [Application.model_validate(item) for item in unwrap_list(data)]

    def apply_for_job(
        self,
        job_id: int,
        application_type: ApplicationType = ApplicationType.APPLY,
        cover_letter: Optional[str] = None,
        proposed_rate: Optional[float] = None,
        shift_id: Optional[int] = None,
    ) -> Optional[Application]:
        application_type = ApplicationType(application_type)
        if application_type is ApplicationType.BID and not (proposed_rate and proposed_rate > 0):
            raise ValueError("A bid requires a positive proposed_rate")

        payload: Dict[str, Any] = {"job": job_id, "application_type": application_type.value}
        if cover_letter:
            payload["cover_letter"] = cover_letter
        if application_type is ApplicationType.BID:
            payload["proposed_rate"] = proposed_rate
        if shift_id is not None:
            payload["shift_id"] = shift_id

        return self._as_application(self.client.post(APPLY_PATH, payload))

    def withdraw(self, application_id: int) -> Optional[Application]:
        return self._as_application(self.client.post(WITHDRAW_PATH.format(id=application_id)))

    def sign_contract(self, application_id: int, signature: str) -> Optional[Application]:
        return self._as_application(
            self.client.post(SIGN_CONTRACT_PATH.format(id=application_id), {"signature": signature})
        )

    def verify_contract(self, application_id: int) -> Optional[Application]:
        return self._as_application(self.client.post(VERIFY_CONTRACT_PATH.format(id=application_id)))

    def send_contract(
        self, application_id: int, terms: Optional[ContractTerms] = None
    ) -> Optional[Application]:
        payload = terms.model_dump(mode="json", exclude_none=True) if terms else None
        return self._as_application(
            self.client.post(SEND_CONTRACT_PATH.format(id=application_id), payload)
        )

    def update_status(
        self, application_id: int, status: ApplicationStatus, notes: Optional[str] = None
    ) -> Optional[Application]:
        payload: Dict[str, Any] = {"status": ApplicationStatus(status).value}
        if notes:
            payload["notes"] = notes
        return self._as_application(self.client.post(STATUS_PATH.format(id=application_id), payload))

    @staticmethod
    def _as_application(data: Any) -> Optional[Application]:
        """Mutation responses are either the application itself or wrap it under 'application'."""
        if not isinstance(data, dict):
            return None
        candidate = data.get("application", data)
        if isinstance(candidate, dict) and "id" in candidate and "status" in candidate:
            return Application.model_validate(candidate)
        return None
