"""Token validation gate in front of the track lookup.

The gate walks a small state machine per request::

    UNAUTHENTICATED -> PROBING -> AUTHENTICATED -> FETCHING -> DONE
                          |             ^
                          v             |
                      REFRESHING -------+

Any failure moves it to FAILED. REFRESHING can be entered at most once, so a
token that is still rejected after a refresh ends the request instead of
starting another refresh.
"""

import logging
from enum import Enum
from typing import Callable, List, Optional

from .client import SpotifyClient
from .config import SpotifyConfig
from .errors import AuthenticationFailed, SpotifyApiError, Unauthorized
from .tokens import refresh_access_token
from .tracks import fetch_track_details
from .types import AuthResult, TrackDetails

logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    PROBING = "probing"
    REFRESHING = "refreshing"
    AUTHENTICATED = "authenticated"
    FETCHING = "fetching"
    DONE = "done"
    FAILED = "failed"


_ALLOWED = {
    AuthState.UNAUTHENTICATED: {AuthState.PROBING, AuthState.FAILED},
    AuthState.PROBING: {AuthState.AUTHENTICATED, AuthState.REFRESHING, AuthState.FAILED},
    AuthState.REFRESHING: {AuthState.AUTHENTICATED, AuthState.FAILED},
    AuthState.AUTHENTICATED: {AuthState.FETCHING},
    AuthState.FETCHING: {AuthState.DONE, AuthState.FAILED},
    AuthState.DONE: set(),
    AuthState.FAILED: set(),
}


class AuthGate:
    def __init__(
        self,
        config: SpotifyConfig,
        client_factory: Callable[..., SpotifyClient] = SpotifyClient,
        refresher: Callable[[SpotifyConfig, str], str] = refresh_access_token,
    ):
        self.config = config
        self.client_factory = client_factory
        self.refresher = refresher
        self.state = AuthState.UNAUTHENTICATED
        self.transitions: List[AuthState] = [AuthState.UNAUTHENTICATED]
        self.client: Optional[SpotifyClient] = None
        self.refreshed = False

    def _move(self, new_state: AuthState) -> None:
        if new_state not in _ALLOWED[self.state]:
            raise RuntimeError(f"invalid auth transition {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.transitions.append(new_state)

    def _fail(self, error: Exception) -> Exception:
        self._move(AuthState.FAILED)
        return error

    def authenticate(self, access_token: Optional[str], refresh_token: Optional[str] = None) -> AuthResult:
        """Make sure ``access_token`` (or its refreshed replacement) is accepted upstream."""
        if not access_token:
            raise self._fail(Unauthorized())

        self._move(AuthState.PROBING)
        self.client = self.client_factory(access_token, api_url=self.config.api_url, timeout=self.config.timeout)
        try:
            self.client.get_me()
        except SpotifyApiError as e:
            if not (e.is_unauthorized and refresh_token):
                logger.warning(f"[AuthGate] token probe failed: status={e.status_code}")
                raise self._fail(AuthenticationFailed()) from e

            self._move(AuthState.REFRESHING)
            logger.info("[AuthGate] access token expired, refreshing")
            try:
                access_token = self.refresher(self.config, refresh_token)
            except SpotifyApiError as refresh_error:
                logger.error(f"[AuthGate] refresh failed: status={refresh_error.status_code} {refresh_error}")
                raise self._fail(AuthenticationFailed()) from refresh_error
            self.client.set_access_token(access_token)
            self.refreshed = True

        self._move(AuthState.AUTHENTICATED)
        return AuthResult(access_token=access_token, refreshed=self.refreshed)

    def fetch_track(self, track_id: str) -> TrackDetails:
        self._move(AuthState.FETCHING)
        try:
            details = fetch_track_details(self.client, track_id)
        except Exception:
            self._move(AuthState.FAILED)
            raise
        self._move(AuthState.DONE)
        return details
