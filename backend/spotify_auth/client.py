import logging
from typing import Any, Dict, List, Optional

import requests

from .config import SPOTIFY_API
from .errors import SpotifyApiError

logger = logging.getLogger(__name__)


class SpotifyClient:
    """Bearer-token client for the Spotify Web API.

    A new client is built for every request; the only state it holds is the
    access token currently in use.
    """

    def __init__(self, access_token: str, api_url: str = SPOTIFY_API, timeout: Optional[float] = 10):
        self.access_token = access_token
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout

    def set_access_token(self, access_token: str) -> None:
        self.access_token = access_token

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.api_url}{path}"
        try:
            response = requests.get(
                url,
                headers={
                    'Authorization': f'Bearer {self.access_token}',
                    'Content-Type': 'application/json'
                },
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"[SpotifyClient] GET {path} failed: {e}")
            raise SpotifyApiError(f"Request to {path} failed: {e}") from e

        if not response.ok:
            logger.warning(f"[SpotifyClient] GET {path} returned {response.status_code}: {response.text[:200]}")
            raise SpotifyApiError(
                f"Spotify returned {response.status_code} for {path}",
                status_code=response.status_code,
                body=response.text,
                headers=response.headers,
            )
        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"[SpotifyClient] GET {path} returned a body that is not JSON: {response.text[:200]}")
            raise SpotifyApiError(f"Invalid JSON from {path}", status_code=response.status_code, body=response.text) from e

    def get_me(self) -> Dict[str, Any]:
        """Current user's profile; used as a cheap token validity probe."""
        return self._get('/me')

    def get_track(self, track_id: str) -> Dict[str, Any]:
        return self._get(f'/tracks/{track_id}')

    def get_tracks(self, track_ids: List[str]) -> List[Dict[str, Any]]:
        """Several tracks in one call. Spotify accepts at most 50 ids."""
        if not track_ids:
            return []
        if len(track_ids) > 50:
            raise ValueError(f"too many track IDs; max is 50, got {len(track_ids)}")
        data = self._get('/tracks', params={'ids': ','.join(track_ids)})
        return [track for track in data.get('tracks', []) if track]
