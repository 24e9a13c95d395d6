"""Calls against the Spotify accounts token endpoint.

Three grants are used:

* ``refresh_token`` to renew a user's expired access token,
* ``authorization_code`` to finish the login redirect,
* ``client_credentials`` for app-level catalog reads (release listing).
"""

import base64
import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional

import requests

from .config import SpotifyConfig
from .errors import SpotifyApiError

logger = logging.getLogger(__name__)

# Refresh the cached app token this many seconds before Spotify expires it
EXPIRY_MARGIN = 60


@dataclass
class TokenResponse:
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: int = 3600


def basic_auth_header(client_id: str, client_secret: str) -> str:
    auth_string = f"{client_id}:{client_secret}"
    return f"Basic {base64.b64encode(auth_string.encode()).decode()}"


def _post_token(config: SpotifyConfig, data: Dict[str, str]) -> dict:
    try:
        response = requests.post(
            config.token_url,
            headers={
                'Content-Type': 'application/x-www-form-urlencoded',
                'Authorization': basic_auth_header(config.client_id, config.client_secret)
            },
            data=data,
            timeout=config.timeout,
        )
    except requests.RequestException as e:
        logger.warning(f"[token] {data['grant_type']} request failed: {e}")
        raise SpotifyApiError(f"Token request failed: {e}") from e

    if not response.ok:
        logger.warning(f"[token] {data['grant_type']} returned {response.status_code}: {response.text[:200]}")
        raise SpotifyApiError(
            f"Token endpoint returned {response.status_code}",
            status_code=response.status_code,
            body=response.text,
        )

    try:
        payload = response.json()
    except ValueError as e:
        logger.warning(f"[token] {data['grant_type']} returned a body that is not JSON: {response.text[:200]}")
        raise SpotifyApiError("Invalid JSON from token endpoint", status_code=response.status_code, body=response.text) from e
    if not payload.get('access_token'):
        raise SpotifyApiError("Received empty access token", status_code=response.status_code)
    return payload


def refresh_access_token(config: SpotifyConfig, refresh_token: str) -> str:
    """Refresh Spotify access token using refresh token"""
    payload = _post_token(config, {
        'grant_type': 'refresh_token',
        'refresh_token': refresh_token
    })
    return payload['access_token']


def exchange_code(config: SpotifyConfig, code: str) -> TokenResponse:
    """Trade the authorization code from the login callback for user tokens."""
    payload = _post_token(config, {
        'grant_type': 'authorization_code',
        'code': code,
        'redirect_uri': config.redirect_uri
    })
    return TokenResponse(
        access_token=payload['access_token'],
        refresh_token=payload.get('refresh_token'),
        expires_in=int(payload.get('expires_in', 3600)),
    )


class ClientCredentialsCache:
    """App token from the client credentials grant, reused until shortly before it expires."""

    def __init__(self, clock=time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._token: Optional[str] = None
        self._expires_at = 0.0

    def get_token(self, config: SpotifyConfig) -> str:
        with self._lock:
            if self._token and self._clock() < self._expires_at - EXPIRY_MARGIN:
                return self._token

            payload = _post_token(config, {'grant_type': 'client_credentials'})
            self._token = payload['access_token']
            self._expires_at = self._clock() + int(payload.get('expires_in', 3600))
            logger.info(f"[ClientCredentialsCache] fetched new app token, expires in {payload.get('expires_in')}s")
            return self._token
