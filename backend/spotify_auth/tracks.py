import logging
from typing import Any, Dict

from .client import SpotifyClient
from .errors import BadRequest, SpotifyApiError, UpstreamFetchFailed
from .types import TrackDetails

logger = logging.getLogger(__name__)


def reshape_track(body: Dict[str, Any]) -> TrackDetails:
    """Project a Spotify track object onto the fields the site uses.

    ``artist`` is always the first listed artist.
    """
    return TrackDetails(
        name=body['name'],
        popularity=int(body.get('popularity') or 0),
        artist=body['artists'][0]['name'],
        album=body['album']['name'],
        preview_url=body.get('preview_url'),
        uri=body['uri'],
    )


def fetch_track_details(client: SpotifyClient, track_id: str) -> TrackDetails:
    if not track_id:
        raise BadRequest("Track ID is required")

    try:
        body = client.get_track(track_id)
    except SpotifyApiError as e:
        logger.error(f"[fetch_track_details] Error fetching track data for {track_id}: status={e.status_code} {e}")
        raise UpstreamFetchFailed.from_api_error(e) from e

    try:
        return reshape_track(body)
    except (KeyError, IndexError, TypeError) as e:
        logger.error(f"[fetch_track_details] Unexpected track payload for {track_id}: {e!r}")
        raise UpstreamFetchFailed(UpstreamFetchFailed.UPSTREAM) from e
