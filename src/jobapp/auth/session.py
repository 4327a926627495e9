"""Explicit authentication context passed to the API client."""

import logging
from typing import Optional

from ..models.user import Profile, User
from .token_store import InMemoryTokenStore, TokenStore

logger = logging.getLogger(__name__)


class SessionContext:
    """Holds the token store, the signed-in user and their profile."""

    def __init__(self, token_store: Optional[TokenStore] = None):
        self.token_store = token_store or InMemoryTokenStore()
        self.user: Optional[User] = None
        self.profile: Optional[Profile] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token_store.get_access_token() is not None

    @property
    def legal_name(self) -> str:
        """Name a contract signature must match; empty when no profile is loaded."""
        if self.profile is None:
            return ""
        return self.profile.legal_name

    def auth_headers(self) -> dict:
        token = self.token_store.get_access_token()
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def sign_in(self, access_token: str, refresh_token: str, user: Optional[User] = None) -> None:
        self.token_store.set_tokens(access_token, refresh_token)
        if user is not None:
            self.user = user

    def clear(self) -> None:
        """Drop tokens and identity, forcing re-authentication."""
        logger.info("Clearing local session")
        self.token_store.clear()
        self.user = None
        self.profile = None
