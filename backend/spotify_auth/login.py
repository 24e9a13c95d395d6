import secrets
from typing import Optional
from urllib.parse import urlencode

from .config import SpotifyConfig

STATE_COOKIE = "spotify_auth_state"
STATE_MAX_AGE = 600


def generate_state() -> str:
    return secrets.token_urlsafe(16)


def build_authorize_url(config: SpotifyConfig, state: str) -> str:
    query = urlencode({
        'response_type': 'code',
        'client_id': config.client_id,
        'scope': config.scope,
        'redirect_uri': config.redirect_uri,
        'state': state,
    })
    return f"{config.authorize_url}?{query}"


def state_matches(expected: Optional[str], received: Optional[str]) -> bool:
    """Compare the state echoed by Spotify with the one stored at login."""
    if not expected or not received:
        return False
    return secrets.compare_digest(expected, received)
