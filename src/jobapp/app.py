"""Wiring for a ready-to-use lifecycle view."""

import logging
from datetime import timedelta
from typing import Optional

import requests

from .api.client import ApiClient
from .auth.session import SessionContext
from .auth.token_store import InMemoryTokenStore, SqliteTokenStore, TokenStore
from .config import Settings, get_settings
from .lifecycle.view import ApplicationLifecycleView
from .logging_config import setup_logging
from .services.application_service import ApplicationService
from .services.work_service import WorkService
from .utils.location import Coordinates, LocationProvider, StaticLocationProvider

logger = logging.getLogger(__name__)


def build_token_store(settings: Settings) -> TokenStore:
    if settings.token_db_path:
        return SqliteTokenStore(settings.token_db_path)
    return InMemoryTokenStore()


def create_client(
    settings: Optional[Settings] = None,
    session: Optional[SessionContext] = None,
    http: Optional[requests.Session] = None,
) -> ApiClient:
    """Build an ApiClient, creating the session context from settings when not given."""
    settings = settings or get_settings()
    session = session or SessionContext(build_token_store(settings))
    return ApiClient(session, settings=settings, http=http)


def create_lifecycle_view(
    settings: Optional[Settings] = None,
    session: Optional[SessionContext] = None,
    location_provider: Optional[LocationProvider] = None,
    http: Optional[requests.Session] = None,
    job_id: Optional[int] = None,
) -> ApplicationLifecycleView:
    """Build an ApplicationLifecycleView with its client and services.

    Missing collaborators are created from settings: the token store from
    ``token_db_path`` and a static location at the configured default position.
    """
    settings = settings or get_settings()
    setup_logging("jobapp", level=settings.log_level, log_dir=settings.log_dir)

    client = create_client(settings, session, http)
    location_provider = location_provider or StaticLocationProvider(
        Coordinates(settings.default_latitude, settings.default_longitude)
    )

    logger.info(f"Lifecycle view using API at {settings.base_url}")
    return ApplicationLifecycleView(
        client.session,
        ApplicationService(client),
        WorkService(client),
        location_provider,
        job_id=job_id,
        early_clock_in=timedelta(minutes=settings.clock_in_early_minutes),
        currency=settings.default_currency,
    )
