"""HTTP client for the marketplace REST API."""

import logging
from typing import Any, Dict, Optional

import requests

from ..auth.session import SessionContext
from ..config import Settings, get_settings
from .errors import ApiError, ErrorKind

logger = logging.getLogger(__name__)

TOKEN_REFRESH_PATH = "/auth/token/refresh/"

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class ApiClient:
    """Thin wrapper around a requests session.

    Attaches the bearer token from the session context to every request and
    performs a single refresh-and-retry when the API answers 401. Every failure
    leaves this class as an ApiError.
    """

    def __init__(
        self,
        session: SessionContext,
        settings: Optional[Settings] = None,
        http: Optional[requests.Session] = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.base_url = self.settings.base_url
        self.timeout = self.settings.request_timeout
        self._http = http or requests.Session()

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        _retry: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body (None when empty).

        Raises:
            ApiError: on transport failures and non-2xx responses
        """
        url = self.url_for(path)
        headers = dict(DEFAULT_HEADERS)
        headers.update(self.session.auth_headers())
        logger.debug(
            f"API Request: {method} {url} "
            f"[{'Authenticated' if 'Authorization' in headers else 'No Auth'}]"
        )

        try:
            response = self._http.request(
                method,
                url,
                json=json,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"API {method} {url} failed: {e!s}")
            raise ApiError.network(e) from e

        if response.status_code == 401:
            if _retry and self._refresh_access_token():
                return self.request(method, path, json=json, params=params, _retry=False)
            self.session.clear()

        if not response.ok:
            error = ApiError.from_response(response.status_code, self._decode(response))
            logger.warning(f"API {method} {url} returned {response.status_code}: {error.message}")
            raise error

        return self._decode(response)

    def _refresh_access_token(self) -> bool:
        """Exchange the stored refresh token for a new access token."""
        refresh_token = self.session.token_store.get_refresh_token()
        if not refresh_token:
            return False

        try:
            response = self._http.request(
                "POST",
                self.url_for(TOKEN_REFRESH_PATH),
                json={"refresh": refresh_token},
                headers=dict(DEFAULT_HEADERS),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Token refresh failed: {e!s}")
            return False

        if not response.ok:
            logger.warning(f"Token refresh rejected with status {response.status_code}")
            return False

        try:
            data = self._decode(response)
        except ApiError as e:
            logger.warning(f"Token refresh response could not be read: {e.message}")
            return False
        if not isinstance(data, dict) or not data.get("access"):
            logger.warning("Token refresh response did not contain an access token")
            return False

        # Rotated refresh tokens replace the stored one
        self.session.token_store.set_tokens(data["access"], data.get("refresh") or refresh_token)
        logger.info("Access token refreshed")
        return True

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            if response.ok:
                raise ApiError(ErrorKind.SERVER, "The server returned an unreadable response.")
            return response.text
