"""
Application Lifecycle View

Holds the fetched applications for one perspective (the seeker's own
applications, or the applications for one of an employer's jobs), offers the
transitions valid for each, delegates them to the API and re-fetches the whole
collection after every successful mutation.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from ..api.errors import ApiError
from ..auth.session import SessionContext
from ..models.application import Application, ApplicationStatus, ContractTerms
from ..models.work import WorkSession
from ..services.application_service import ApplicationService
from ..services.work_service import BREAK_TYPES, WorkService
from ..utils.currency import format_currency
from ..utils.location import Coordinates, LocationProvider, LocationUnavailable
from . import rules

logger = logging.getLogger(__name__)

MAX_WORKERS = 4

# Action names for available_actions() and the in-flight guard
WITHDRAW = "withdraw"
SIGN_CONTRACT = "sign_contract"
VERIFY_CONTRACT = "verify_contract"
SEND_CONTRACT = "send_contract"
UPDATE_STATUS = "update_status"
CLOCK_IN = "clock_in"
CLOCK_OUT = "clock_out"
START_BREAK = "start_break"
END_BREAK = "end_break"
REPORT_TO_WORK = "report_to_work"


@dataclass
class TrackedApplication:
    """An application plus whether it came from an authoritative fetch."""

    application: Application
    confirmed: bool = True


@dataclass
class ActionResult:
    """Outcome of a user action, ready to be shown as an alert."""

    ok: bool
    message: str = ""
    title: str = ""
    error: Optional[ApiError] = None
    follow_up: Optional[str] = None
    data: Any = None

    @classmethod
    def failure(cls, error: ApiError, title: str = "Error") -> "ActionResult":
        return cls(ok=False, message=error.message, title=title, error=error)


@dataclass
class _Pending:
    key: Tuple[str, int]
    previous: Optional[TrackedApplication] = None


class ApplicationLifecycleView:
    """Client-side view of the application lifecycle.

    Local copies are only ever replaced wholesale: optimistic patches are stored
    as unconfirmed entries and the next successful refresh() swaps the whole
    collection for server data.
    """

    def __init__(
        self,
        session: SessionContext,
        applications: ApplicationService,
        work: WorkService,
        location_provider: LocationProvider,
        *,
        job_id: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
        early_clock_in: timedelta = rules.DEFAULT_EARLY_CLOCK_IN,
        currency: str = "MYR",
        max_workers: int = MAX_WORKERS,
    ):
        """Initialize the view.

        Args:
            session: Authentication context; supplies the signer's legal name
            applications: Remote application operations
            work: Remote work-session operations
            location_provider: Queried afresh on every clock-in/out
            job_id: When set, the view lists applications for this employer job
                instead of the current user's own applications
            clock: Source of "now" for the clock-in window
            early_clock_in: How long before shift start clock-in opens
            currency: Currency used in earnings messages
            max_workers: Threads available for blocking HTTP calls
        """
        self.session = session
        self.applications_service = applications
        self.work_service = work
        self.location_provider = location_provider
        self.job_id = job_id
        self.clock = clock
        self.early_clock_in = early_clock_in
        self.currency = currency

        self._entries: Dict[int, TrackedApplication] = {}
        self._in_flight: Set[Tuple[str, int]] = set()
        self._executor = ThreadPoolExecutor(max_workers=max_workers)

        self.active_session: Optional[WorkSession] = None
        self.last_error: Optional[ApiError] = None
        self.last_refreshed_at: Optional[datetime] = None

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    def __enter__(self) -> "ApplicationLifecycleView":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    async def __aenter__(self) -> "ApplicationLifecycleView":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Queries over the local copy
    # ------------------------------------------------------------------

    def get(self, application_id: int) -> Optional[Application]:
        entry = self._entries.get(application_id)
        return entry.application if entry else None

    def is_confirmed(self, application_id: int) -> bool:
        entry = self._entries.get(application_id)
        return bool(entry and entry.confirmed)

    def applications(self, status_filter: str = "all") -> List[Application]:
        """Applications newest first, optionally limited to one status."""
        items = [entry.application for entry in self._entries.values()]
        if status_filter != "all":
            wanted = ApplicationStatus(status_filter)
            items = [app for app in items if app.status is wanted]
        return sorted(
            items,
            key=lambda app: app.created_at.timestamp() if app.created_at else float("-inf"),
            reverse=True,
        )

    def active_applications(self) -> List[Application]:
        return [
            app for app in self.applications() if app.status not in rules.ABSORBING_STATUSES
        ]

    def contract_phase(self, application_id: int) -> rules.ContractPhase:
        application = self.get(application_id)
        if application is None:
            return rules.ContractPhase.NONE
        return rules.contract_phase(application)

    def available_actions(self, application_id: int) -> List[str]:
        """Actions the current user may trigger on this application right now."""
        application = self.get(application_id)
        if application is None:
            return []

        user = self.session.user
        is_employer = bool(user and user.is_employer)
        actions: List[str] = []

        if is_employer:
            if not rules.is_terminal(application.status):
                actions.append(UPDATE_STATUS)
            if application.status is ApplicationStatus.ACCEPTED:
                actions.append(SEND_CONTRACT)
            if rules.can_verify(application):
                actions.append(VERIFY_CONTRACT)
            return actions

        if rules.can_withdraw(application):
            actions.append(WITHDRAW)
        if rules.can_sign(application):
            actions.append(SIGN_CONTRACT)
        if rules.can_clock_in(application, self.clock(), self.early_clock_in):
            actions.append(CLOCK_IN)
        return actions

    def is_in_flight(self, action: str, application_id: int) -> bool:
        return (action, application_id) in self._in_flight

    # ------------------------------------------------------------------
    # Remote synchronisation
    # ------------------------------------------------------------------

    async def refresh(self) -> ActionResult:
        """Replace the whole local collection with the server's."""
        try:
            if self.job_id is not None:
                fetched = await self._execute_in_thread(
                    self.applications_service.list_job_applications, self.job_id
                )
            else:
                fetched = await self._execute_in_thread(
                    self.applications_service.list_my_applications
                )
        except ApiError as e:
            logger.error(f"Failed to load applications: {e.message}")
            self.last_error = e
            return ActionResult.failure(e)

        self._entries = {app.id: TrackedApplication(app, confirmed=True) for app in fetched}
        self.last_refreshed_at = self.clock()
        self.last_error = None
        logger.debug(f"Loaded {len(fetched)} applications")
        return ActionResult(ok=True, data=fetched)

    async def load_active_session(self) -> ActionResult:
        try:
            self.active_session = await self._execute_in_thread(self.work_service.get_active_session)
        except ApiError as e:
            logger.error(f"Failed to load active work session: {e.message}")
            return ActionResult.failure(e)
        return ActionResult(ok=True, data=self.active_session)

    # ------------------------------------------------------------------
    # Seeker actions
    # ------------------------------------------------------------------

    async def withdraw(self, application_id: int) -> ActionResult:
        application = self.get(application_id)
        if application is None:
            return self._not_loaded(application_id)
        if not rules.can_withdraw(application):
            return ActionResult.failure(
                ApiError.precondition("You can only withdraw pending or reviewed applications."),
                title="Cannot Withdraw",
            )

        pending = self._begin(WITHDRAW, application_id)
        if pending is None:
            return self._busy()
        try:
            returned = await self._execute_in_thread(
                self.applications_service.withdraw, application_id
            )
        except ApiError as e:
            logger.warning(f"Withdraw of application {application_id} failed: {e.message}")
            # State after a failed withdraw is unknown; ask the server
            await self.refresh()
            return ActionResult.failure(e)
        finally:
            self._end(pending)

        self._patch(returned or application.model_copy(update={"status": ApplicationStatus.WITHDRAWN}))
        logger.info(f"Application {application_id} withdrawn")
        await self.refresh()
        return ActionResult(
            ok=True, title="Success", message="Application withdrawn successfully", data=returned
        )

    async def sign_contract(self, application_id: int, signature: str) -> ActionResult:
        application = self.get(application_id)
        if application is None:
            return self._not_loaded(application_id)
        if not rules.can_sign(application):
            return ActionResult.failure(
                ApiError.precondition("This contract is not awaiting your signature."),
                title="Cannot Sign",
            )

        expected = self.session.legal_name
        if not expected:
            return ActionResult.failure(
                ApiError.precondition("Add your full name to your profile before signing."),
                title="Cannot Sign",
            )
        if not rules.signature_matches(signature, expected):
            return ActionResult.failure(
                ApiError.precondition(
                    f"Your signature must match your full legal name exactly: {expected}"
                ),
                title="Signature Mismatch",
            )

        pending = self._begin(SIGN_CONTRACT, application_id)
        if pending is None:
            return self._busy()

        signature = " ".join(signature.split())
        self._patch(
            application.model_copy(
                update={"seeker_signature": signature, "seeker_signed_at": self.clock()}
            )
        )
        try:
            returned = await self._execute_in_thread(
                self.applications_service.sign_contract, application_id, signature
            )
        except ApiError as e:
            logger.warning(f"Signing contract for application {application_id} failed: {e.message}")
            self._rollback(pending)
            return ActionResult.failure(e)
        finally:
            self._end(pending)

        if returned is not None:
            self._patch(returned)
        logger.info(f"Contract for application {application_id} signed")
        await self.refresh()
        return ActionResult(
            ok=True,
            title="Contract Signed",
            message="Contract signed. Waiting for the employer to verify it.",
            data=returned,
        )

    async def clock_in(self, application_id: int) -> ActionResult:
        application = self.get(application_id)
        if application is None:
            return self._not_loaded(application_id)

        reason = rules.clock_in_block_reason(application, self.clock(), self.early_clock_in)
        if reason:
            return ActionResult.failure(ApiError.precondition(reason), title="Cannot Clock In")

        pending = self._begin(CLOCK_IN, application_id)
        if pending is None:
            return self._busy()
        try:
            location = await self._current_location()
            if location is None:
                return ActionResult.failure(
                    ApiError.precondition("Please enable location services to clock in."),
                    title="Location Required",
                )
            shift_id = application.shift_details.id if application.shift_details else None
            result = await self._execute_in_thread(
                self.work_service.clock_in, application_id, location, shift_id
            )
        except ApiError as e:
            logger.warning(f"Clock-in for application {application_id} failed: {e.message}")
            return ActionResult.failure(e)
        finally:
            self._end(pending)

        self.active_session = result.session
        title = "Clocked In!" if result.is_within_geofence else "Clocked In (Outside Geofence)"
        await self.refresh()
        return ActionResult(ok=True, title=title, message=result.message, data=result)

    async def clock_out(self) -> ActionResult:
        session = self.active_session
        if session is None:
            return ActionResult.failure(
                ApiError.precondition("You have no active work session."), title="Cannot Clock Out"
            )

        pending = self._begin(CLOCK_OUT, session.id)
        if pending is None:
            return self._busy()
        try:
            location = await self._current_location()
            if location is None:
                return ActionResult.failure(
                    ApiError.precondition("Please enable location services to clock out."),
                    title="Location Required",
                )
            result = await self._execute_in_thread(self.work_service.clock_out, session.id, location)
        except ApiError as e:
            logger.warning(f"Clock-out of session {session.id} failed: {e.message}")
            return ActionResult.failure(e)
        finally:
            self._end(pending)

        self.active_session = None
        message = (
            f"Total hours: {result.total_hours}\n"
            f"Earnings: {format_currency(result.total_earnings, self.currency)}"
        )
        await self.refresh()
        return ActionResult(ok=True, title="Clocked Out!", message=message, data=result)

    async def start_break(self, break_type: str = "other", notes: Optional[str] = None) -> ActionResult:
        session = self.active_session
        if session is None or session.status != "active":
            return ActionResult.failure(ApiError.precondition("You are not clocked in."))
        if break_type not in BREAK_TYPES:
            return ActionResult.failure(
                ApiError.precondition(f"Break type must be one of: {', '.join(BREAK_TYPES)}.")
            )

        pending = self._begin(START_BREAK, session.id)
        if pending is None:
            return self._busy()
        try:
            work_break = await self._execute_in_thread(
                self.work_service.start_break, session.id, break_type, notes
            )
        except ApiError as e:
            logger.warning(f"Starting a break in session {session.id} failed: {e.message}")
            return ActionResult.failure(e)
        finally:
            self._end(pending)

        self.active_session = session.model_copy(
            update={"status": "on_break", "breaks": [*session.breaks, work_break]}
        )
        return ActionResult(ok=True, message="Break started", data=work_break)

    async def end_break(self) -> ActionResult:
        session = self.active_session
        if session is None or session.status != "on_break":
            return ActionResult.failure(ApiError.precondition("You are not on a break."))

        pending = self._begin(END_BREAK, session.id)
        if pending is None:
            return self._busy()
        try:
            work_break = await self._execute_in_thread(self.work_service.end_break, session.id)
        except ApiError as e:
            logger.warning(f"Ending the break in session {session.id} failed: {e.message}")
            return ActionResult.failure(e)
        finally:
            self._end(pending)

        breaks = [b for b in session.breaks if b.id != work_break.id] + [work_break]
        self.active_session = session.model_copy(update={"status": "active", "breaks": breaks})
        return ActionResult(ok=True, message="Break ended", data=work_break)

    async def report_to_work(
        self, application_id: int, estimated_arrival_minutes: Optional[int] = None
    ) -> ActionResult:
        """Let the employer know the seeker is on the way to the shift."""
        application = self.get(application_id)
        if application is None:
            return self._not_loaded(application_id)
        if application.status not in rules.CLOCK_IN_STATUSES:
            return ActionResult.failure(
                ApiError.precondition("You can only report to work once the contract has been acknowledged."),
                title="Cannot Report",
            )

        pending = self._begin(REPORT_TO_WORK, application_id)
        if pending is None:
            return self._busy()
        try:
            location = await self._current_location()
            if location is None:
                return ActionResult.failure(
                    ApiError.precondition("Please enable location services to report to work."),
                    title="Location Required",
                )
            shift_id = application.shift_details.id if application.shift_details else None
            report = await self._execute_in_thread(
                self.work_service.report_to_work,
                application_id,
                location,
                shift_id,
                estimated_arrival_minutes,
            )
        except ApiError as e:
            logger.warning(f"Report to work for application {application_id} failed: {e.message}")
            return ActionResult.failure(e)
        finally:
            self._end(pending)

        return ActionResult(
            ok=True, title="On Your Way", message="Your employer has been notified.", data=report
        )

    # ------------------------------------------------------------------
    # Employer actions
    # ------------------------------------------------------------------

    async def update_status(
        self, application_id: int, target: ApplicationStatus, notes: Optional[str] = None
    ) -> ActionResult:
        try:
            target = ApplicationStatus(target)
        except ValueError:
            target = None
        if target not in rules.EMPLOYER_REVIEW_TARGETS:
            return ActionResult.failure(
                ApiError.precondition(
                    "Status can only be set to reviewed, shortlisted, accepted or rejected."
                )
            )

        application = self.get(application_id)
        if application is None:
            return self._not_loaded(application_id)

        pending = self._begin(UPDATE_STATUS, application_id)
        if pending is None:
            return self._busy()
        try:
            returned = await self._execute_in_thread(
                self.applications_service.update_status, application_id, target, notes
            )
        except ApiError as e:
            logger.warning(f"Status update of application {application_id} failed: {e.message}")
            return ActionResult.failure(e)
        finally:
            self._end(pending)

        self._patch(returned or application.model_copy(update={"status": target}))
        logger.info(f"Application {application_id} moved to {target.value}")
        await self.refresh()
        return ActionResult(
            ok=True,
            message=f"Application marked as {target.value}",
            follow_up=SEND_CONTRACT if target is ApplicationStatus.ACCEPTED else None,
            data=returned,
        )

    async def send_contract(
        self, application_id: int, terms: Optional[ContractTerms] = None
    ) -> ActionResult:
        application = self.get(application_id)
        if application is None:
            return self._not_loaded(application_id)
        if application.status is not ApplicationStatus.ACCEPTED:
            return ActionResult.failure(
                ApiError.precondition("A contract can only be sent for an accepted application.")
            )

        pending = self._begin(SEND_CONTRACT, application_id)
        if pending is None:
            return self._busy()
        try:
            returned = await self._execute_in_thread(
                self.applications_service.send_contract, application_id, terms
            )
        except ApiError as e:
            logger.warning(f"Sending contract for application {application_id} failed: {e.message}")
            return ActionResult.failure(e)
        finally:
            self._end(pending)

        self._patch(
            returned
            or application.model_copy(
                update={"status": ApplicationStatus.CONTRACT_SENT, "contract_terms": terms}
            )
        )
        await self.refresh()
        return ActionResult(ok=True, title="Contract Sent", message="Contract sent to the candidate.", data=returned)

    async def verify_contract(self, application_id: int) -> ActionResult:
        application = self.get(application_id)
        if application is None:
            return self._not_loaded(application_id)
        if not rules.can_verify(application):
            return ActionResult.failure(
                ApiError.precondition("This contract is not awaiting verification."),
                title="Cannot Verify",
            )

        pending = self._begin(VERIFY_CONTRACT, application_id)
        if pending is None:
            return self._busy()
        try:
            returned = await self._execute_in_thread(
                self.applications_service.verify_contract, application_id
            )
        except ApiError as e:
            logger.warning(f"Verifying contract for application {application_id} failed: {e.message}")
            return ActionResult.failure(e)
        finally:
            self._end(pending)

        self._patch(
            returned
            or application.model_copy(
                update={
                    "status": ApplicationStatus.CONTRACT_ACKNOWLEDGED,
                    "employer_verified_at": self.clock(),
                }
            )
        )
        await self.refresh()
        return ActionResult(ok=True, title="Contract Verified", message="Contract verified.", data=returned)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _execute_in_thread(self, func, *args, **kwargs):
        """Run a blocking call on the executor so the event loop keeps running."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, lambda: func(*args, **kwargs))

    async def _current_location(self) -> Optional[Coordinates]:
        try:
            return await self._execute_in_thread(self.location_provider.get_current_position)
        except LocationUnavailable as e:
            logger.info(f"Location unavailable: {e!s}")
            return None

    def _begin(self, action: str, application_id: int) -> Optional[_Pending]:
        """Mark an action in flight; None when the same action is already pending."""
        key = (action, application_id)
        if key in self._in_flight:
            logger.info(f"Ignoring duplicate {action} for {application_id}")
            return None
        self._in_flight.add(key)
        return _Pending(key=key, previous=self._entries.get(application_id))

    def _end(self, pending: _Pending) -> None:
        self._in_flight.discard(pending.key)

    def _patch(self, application: Application) -> None:
        self._entries[application.id] = TrackedApplication(application, confirmed=False)

    def _rollback(self, pending: _Pending) -> None:
        if pending.previous is not None:
            self._entries[pending.previous.application.id] = pending.previous

    @staticmethod
    def _busy() -> ActionResult:
        return ActionResult.failure(ApiError.busy(), title="Please Wait")

    @staticmethod
    def _not_loaded(application_id: int) -> ActionResult:
        return ActionResult.failure(
            ApiError.precondition(f"Application {application_id} is not loaded; refresh and try again.")
        )
