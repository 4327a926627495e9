"""Test configuration and fixtures."""

import copy
import json as jsonlib
import re
from datetime import datetime

import pytest
import requests

from jobapp.api.client import ApiClient
from jobapp.auth.session import SessionContext
from jobapp.auth.token_store import InMemoryTokenStore
from jobapp.config import Settings
from jobapp.lifecycle.view import ApplicationLifecycleView
from jobapp.models.user import Profile, User
from jobapp.services.application_service import ApplicationService
from jobapp.services.work_service import WorkService
from jobapp.utils.location import Coordinates, StaticLocationProvider

# Test configuration
TEST_BASE_URL = "https://api.test/api/v1"
FIXED_NOW = datetime(2025, 3, 10, 10, 0, 0)
OFFICE = Coordinates(3.1579, 101.7116)


class FakeResponse:
    """The subset of requests.Response the client relies on."""

    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        if text is not None:
            self.text = text
        elif payload is None:
            self.text = ""
        else:
            self.text = jsonlib.dumps(payload)
        self.content = self.text.encode()

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return jsonlib.loads(self.text)


class FakeBackend:
    """In-process stand-in for the marketplace API, used as the HTTP session.

    Enforces the same lifecycle rules as the real server and records every
    call so tests can assert on what did (or did not) go over the wire.
    """

    def __init__(self, base_url=TEST_BASE_URL):
        self.base_url = base_url
        self.applications = {}
        self.sessions = {}
        self.reports = []
        self.valid_tokens = {"access-1"}
        self.refresh_tokens = {"refresh-1": "access-2"}
        self.require_auth = True
        self.calls = []
        self.fail_next = {}
        self.now = "2025-03-10T10:00:00"

    # -- test helpers -------------------------------------------------------

    def add_application(self, **fields):
        record = {
            "id": fields.pop("id", len(self.applications) + 1),
            "status": "pending",
            "application_type": "apply",
            "job": {"id": 7, "title": "F&B Crew", "company_name": "Kopitiam Express"},
            "created_at": "2025-03-01T09:00:00",
        }
        record.update(fields)
        self.applications[record["id"]] = record
        return record

    def paths_called(self, method=None):
        return [path for (m, path, _) in self.calls if method is None or m == method]

    # -- requests.Session interface -----------------------------------------

    def request(self, method, url, json=None, params=None, headers=None, timeout=None):
        assert url.startswith(self.base_url), url
        path = url[len(self.base_url):]
        self.calls.append((method, path, json))

        failure = self.fail_next.pop(path, None)
        if failure is not None:
            if isinstance(failure, Exception):
                raise failure
            return failure

        if path == "/auth/token/refresh/":
            access = self.refresh_tokens.get((json or {}).get("refresh"))
            if access is None:
                return FakeResponse(401, {"detail": "Token is invalid or expired"})
            self.valid_tokens.add(access)
            return FakeResponse(200, {"access": access})

        if self.require_auth:
            token = (headers or {}).get("Authorization", "").replace("Bearer ", "")
            if token not in self.valid_tokens:
                return FakeResponse(401, {"detail": "Given token not valid for any token type"})

        return self._route(method, path, json or {})

    def _route(self, method, path, body):
        if method == "GET" and path == "/jobs/applications/my/":
            return FakeResponse(200, [copy.deepcopy(a) for a in self.applications.values()])

        if method == "POST" and path == "/jobs/applications/":
            fields = {k: v for k, v in body.items() if k in ("application_type", "cover_letter", "proposed_rate")}
            app = self.add_application(
                job={"id": body["job"], "title": "F&B Crew", "company_name": "Kopitiam Express"},
                created_at=self.now,
                **fields,
            )
            return FakeResponse(201, copy.deepcopy(app))

        match = re.fullmatch(r"/jobs/(\d+)/applications/", path)
        if method == "GET" and match:
            job_id = int(match.group(1))
            return FakeResponse(
                200,
                {"results": [copy.deepcopy(a) for a in self.applications.values()
                             if a["job"]["id"] == job_id]},
            )

        match = re.fullmatch(r"/applications/(\d+)/(\w+)/", path)
        if method == "POST" and match:
            app = self.applications.get(int(match.group(1)))
            if app is None:
                return FakeResponse(404, {"detail": "Not found."})
            return getattr(self, f"_{match.group(2)}")(app, body)

        if method == "POST" and path == "/work/sessions/clock_in/":
            return self._clock_in(body)
        if method == "POST" and path == "/work/sessions/clock_out/":
            return self._clock_out(body)
        if method == "GET" and path == "/work/sessions/active/":
            active = [s for s in self.sessions.values() if s["status"] in ("active", "on_break")]
            return FakeResponse(200, {"active_session": active[0] if active else None})
        if method == "GET" and path == "/work/sessions/history/":
            return FakeResponse(200, {"sessions": [copy.deepcopy(s) for s in self.sessions.values()]})
        if method == "POST" and path == "/work/reports/":
            return self._report(body)
        if method == "GET" and path == "/work/reports/":
            return FakeResponse(200, {"count": len(self.reports), "results": copy.deepcopy(self.reports)})

        match = re.fullmatch(r"/work/sessions/(\d+)/(?:(\w+)/)?", path)
        if match:
            session = self.sessions.get(int(match.group(1)))
            if session is None:
                return FakeResponse(404, {"detail": "Not found."})
            action = match.group(2)
            if method == "GET" and action is None:
                return FakeResponse(200, copy.deepcopy(session))
            if method == "POST" and action in ("start_break", "end_break", "employer_confirm"):
                return getattr(self, f"_{action}")(session, body)

        return FakeResponse(404, {"detail": "Not found."})

    def _start_break(self, session, body):
        if session["status"] != "active":
            return FakeResponse(400, {"error": "Session is not active"})
        work_break = {
            "id": len(session.setdefault("breaks", [])) + 1,
            "break_type": body.get("break_type", "other"),
            "start_time": self.now,
            "notes": body.get("notes"),
        }
        session["breaks"].append(work_break)
        session["status"] = "on_break"
        return FakeResponse(200, {"success": True, "break": copy.deepcopy(work_break)})

    def _end_break(self, session, body):
        if session["status"] != "on_break":
            return FakeResponse(400, {"error": "No break in progress"})
        work_break = session["breaks"][-1]
        work_break["end_time"] = self.now
        work_break["duration_minutes"] = 0
        session["status"] = "active"
        return FakeResponse(200, {"success": True, "break": copy.deepcopy(work_break)})

    def _employer_confirm(self, session, body):
        session["employer_confirmed"] = bool(body.get("confirmed"))
        if not body.get("confirmed"):
            session["status"] = "disputed"
        return FakeResponse(200, {"success": True, "session": copy.deepcopy(session)})

    def _report(self, body):
        app = self.applications.get(body["application_id"])
        if app is None or app["status"] not in ("contract_acknowledged", "active"):
            return FakeResponse(400, {"error": "Contract not acknowledged"})
        report = {
            "id": len(self.reports) + 1,
            "application": app["id"],
            "shift": body.get("shift_id"),
            "status": "on_the_way",
            "departure_latitude": body["latitude"],
            "departure_longitude": body["longitude"],
            "estimated_distance_km": 4.2,
            "reported_at": self.now,
            "job_title": app["job"]["title"],
            "company_name": app["job"]["company_name"],
        }
        self.reports.append(report)
        return FakeResponse(201, {"success": True, "report": copy.deepcopy(report)})

    def _withdraw(self, app, body):
        if app["status"] not in ("pending", "reviewed"):
            return FakeResponse(400, {"error": "Application can no longer be withdrawn"})
        app["status"] = "withdrawn"
        return FakeResponse(200, {"message": "Application withdrawn", "application": copy.deepcopy(app)})

    def _status(self, app, body):
        if app["status"] in ("withdrawn", "rejected", "completed"):
            return FakeResponse(400, {"non_field_errors": ["Application is closed"]})
        app["status"] = body["status"]
        if body["status"] == "reviewed":
            app["reviewed_at"] = self.now
        return FakeResponse(200, copy.deepcopy(app))

    def _send_contract(self, app, body):
        if app["status"] != "accepted":
            return FakeResponse(400, {"error": "Application must be accepted first"})
        app["status"] = "contract_sent"
        app["contract_terms"] = body or {"job_title": app["job"]["title"], "hourly_rate": 15.0}
        return FakeResponse(200, copy.deepcopy(app))

    def _sign_contract(self, app, body):
        if app["status"] != "contract_sent" or app.get("seeker_signed_at"):
            return FakeResponse(400, {"error": "Contract is not awaiting signature"})
        app["seeker_signature"] = body["signature"]
        app["seeker_signed_at"] = self.now
        return FakeResponse(200, copy.deepcopy(app))

    def _verify_contract(self, app, body):
        if not app.get("seeker_signed_at"):
            return FakeResponse(400, {"detail": "Contract has not been signed"})
        app["status"] = "contract_acknowledged"
        app["employer_verified_at"] = self.now
        return FakeResponse(200, copy.deepcopy(app))

    def _clock_in(self, body):
        app = self.applications[body["application_id"]]
        if app["status"] not in ("contract_acknowledged", "active"):
            return FakeResponse(400, {"error": "Contract not acknowledged"})
        app["status"] = "active"
        session = {
            "id": len(self.sessions) + 100,
            "application": app["id"],
            "status": "active",
            "clock_in_time": self.now,
            "clock_in_verified": True,
        }
        self.sessions[session["id"]] = session
        return FakeResponse(
            200,
            {
                "success": True,
                "session": copy.deepcopy(session),
                "distance_from_job": 12.5,
                "is_within_geofence": True,
                "message": "Clocked in successfully",
            },
        )

    def _clock_out(self, body):
        session = self.sessions[body["session_id"]]
        session["status"] = "completed"
        return FakeResponse(
            200,
            {"success": True, "session": copy.deepcopy(session), "total_hours": 7.5, "total_earnings": 112.5},
        )


@pytest.fixture
def settings():
    return Settings(api_url=TEST_BASE_URL, request_timeout=5)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def seeker_session():
    session = SessionContext(InMemoryTokenStore())
    session.sign_in("access-1", "refresh-1", User(id=1, email="jane@example.com", user_type="seeker"))
    session.profile = Profile(first_name="Jane", last_name="Doe")
    return session


@pytest.fixture
def employer_session():
    session = SessionContext(InMemoryTokenStore())
    session.sign_in("access-1", "refresh-1", User(id=2, email="boss@example.com", user_type="employer"))
    session.profile = Profile(full_name="Ahmad Boss", company_name="Kopitiam Express")
    return session


@pytest.fixture
def seeker_client(seeker_session, settings, backend):
    return ApiClient(seeker_session, settings=settings, http=backend)


@pytest.fixture
def employer_client(employer_session, settings, backend):
    return ApiClient(employer_session, settings=settings, http=backend)


def build_view(client, job_id=None, now=FIXED_NOW, location=OFFICE):
    return ApplicationLifecycleView(
        client.session,
        ApplicationService(client),
        WorkService(client),
        StaticLocationProvider(location),
        job_id=job_id,
        clock=lambda: now,
    )


@pytest.fixture
def seeker_view(seeker_client):
    view = build_view(seeker_client)
    yield view
    view.close()


@pytest.fixture
def employer_view(employer_client):
    view = build_view(employer_client, job_id=7)
    yield view
    view.close()


@pytest.fixture
def view_factory():
    """Build extra views with a custom clock or location."""
    views = []

    def factory(client, **kwargs):
        view = build_view(client, **kwargs)
        views.append(view)
        return view

    yield factory
    for view in views:
        view.close()


@pytest.fixture
def connection_error():
    return requests.ConnectionError("Connection refused")


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def now():
    return FIXED_NOW
