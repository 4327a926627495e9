"""
Authentication service: login, identity and profile loading.
"""
import logging
from typing import Optional

from ..api.client import ApiClient
from ..api.errors import ApiError, ErrorKind
from ..models.user import Profile, User

logger = logging.getLogger(__name__)


class AuthService:
    """Service for signing in and loading the current identity."""

    def __init__(self, client: ApiClient):
        self.client = client
        self.session = client.session

    def login(self, email: str, password: str) -> User:
        """Log in with email and password and store the returned token pair."""
        data = self.client.post("/auth/login/", {"email": email, "password": password})
        if not isinstance(data, dict) or not data.get("access") or not data.get("refresh"):
            raise ApiError(ErrorKind.SERVER, "Login response did not include tokens.")
        self.session.sign_in(data["access"], data["refresh"])
        user = self.me()
        logger.info(f"Logged in as user {user.id} ({user.user_type})")
        return user

    def me(self) -> User:
        user = User.model_validate(self.client.get("/auth/me/"))
        self.session.user = user
        return user

    def load_profile(self) -> Profile:
        """Fetch the seeker or employer profile for the current user."""
        user = self.session.user or self.me()
        path = "/profile/employer/" if user.is_employer else "/profile/seeker/"
        profile = Profile.model_validate(self.client.get(path))
        self.session.profile = profile
        return profile

    def restore(self) -> Optional[User]:
        """Re-establish identity from stored tokens; clears them if the API rejects them."""
        if not self.session.is_authenticated:
            return None
        try:
            user = self.me()
            self.load_profile()
            return user
        except ApiError as e:
            logger.warning(f"Stored session could not be restored: {e.message}")
            self.session.clear()
            return None

    def logout(self) -> None:
        """Log out remotely if possible; local tokens are always cleared."""
        try:
            self.client.post("/auth/logout/")
        except ApiError as e:
            logger.warning(f"Logout API call failed, clearing local tokens: {e.message}")
        self.session.clear()
