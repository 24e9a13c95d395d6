"""Aguava's release catalog, enriched with live Spotify popularity.

Streams, key and bpm are maintained by hand; popularity is the only field
fetched from Spotify on each request.
"""

import copy
import logging
import time
from typing import Callable, Dict, List

from .client import SpotifyClient
from .errors import SpotifyApiError
from .types import Song

logger = logging.getLogger(__name__)

BATCH_SIZE = 50
MAX_RETRIES = 3
PLACEHOLDER_PREFIX = "YOUR_REAL_"

SORT_FIELDS = {
    'streams': lambda song: song.streams,
    'key': lambda song: song.key,
    'bpm': lambda song: song.bpm,
    'popularity': lambda song: song.popularity,
    'name': lambda song: song.name,
}

SONGS: List[Song] = [
    Song(name="If I", streams=924000, key="B", bpm=119, spotify_id="54Ew6UcuXLChTnSAwXAIXY"),
    Song(name="Payday", streams=556000, key="F", bpm=126, spotify_id="4gpOjiawQcmFqRSwtp7Ppt"),
    Song(name="Quédate Conmigo", streams=111000, key="C", bpm=120, spotify_id="23Byo25q7SjXvpumZv3q4K"),
    Song(name="Whatever Happens, Happens", streams=472000, key="F#", bpm=118, spotify_id="2APRTIVViZequi0ZClGao5"),
    Song(name="Silk Thieves", streams=85900, key="G", bpm=125, spotify_id="3NX8oez6NU2BjJHDK06a65"),
    Song(name="Sinnerman", streams=87100, key="A#", bpm=127, spotify_id="2WSlfpTj1WD3H6vKZCXyik"),
    Song(name="Vanilla", streams=140000, key="F#", bpm=116, spotify_id="0KNQTHbKpmQtRSDgYhkJf7"),
    Song(name="Can We", streams=94800, key="F#", bpm=122, spotify_id="7lDSJLLBjsfPhZi79APe6i"),
    Song(name="Killin' Me", streams=13501, key="A#", bpm=126, spotify_id="5u1SCoT3vRGHnpwYATaNUD"),
    Song(name="Aquatic Movements", streams=19500, key="A", bpm=124, spotify_id="1nHYUvlvvT57PtXdunIJP1"),
]


def fetchable_ids(songs: List[Song]) -> List[str]:
    return [s.spotify_id for s in songs if s.spotify_id and not s.spotify_id.startswith(PLACEHOLDER_PREFIX)]


def _retry_delay(error: SpotifyApiError, attempt: int) -> int:
    retry_after = error.retry_after
    if retry_after is not None:
        return retry_after
    return 5 + attempt * 2


def fetch_batch_with_retry(client: SpotifyClient, ids: List[str], sleep: Callable[[float], None] = time.sleep) -> List[dict]:
    """Fetch one batch of tracks, waiting out 429 responses."""
    for attempt in range(MAX_RETRIES):
        try:
            return client.get_tracks(ids)
        except SpotifyApiError as e:
            if e.status_code != 429:
                raise
            if attempt >= MAX_RETRIES - 1:
                raise SpotifyApiError(f"rate limit exceeded after {MAX_RETRIES} retries", status_code=429) from e
            delay = _retry_delay(e, attempt)
            logger.warning(f"[fetch_batch_with_retry] Rate limit exceeded. Retrying after {delay} seconds...")
            sleep(delay)
    raise SpotifyApiError("max retries reached for Spotify request")


def fetch_popularities(client: SpotifyClient, ids: List[str], sleep: Callable[[float], None] = time.sleep) -> Dict[str, int]:
    popularities: Dict[str, int] = {}
    logger.info(f"[fetch_popularities] Attempting to fetch popularity for {len(ids)} track IDs")

    for start in range(0, len(ids), BATCH_SIZE):
        batch = ids[start:start + BATCH_SIZE]
        try:
            tracks = fetch_batch_with_retry(client, batch, sleep=sleep)
        except SpotifyApiError as e:
            logger.error(f"[fetch_popularities] Error fetching details for batch {batch}: {e}")
            continue
        for track in tracks:
            if track.get('id'):
                popularities[track['id']] = int(track.get('popularity') or 0)

    logger.info(f"[fetch_popularities] Finished fetching popularities. Result map size: {len(popularities)}")
    return popularities


def with_popularity(songs: List[Song], popularities: Dict[str, int]) -> List[Song]:
    """Copies of ``songs`` with popularity filled in; unknown ids get 0."""
    result = copy.deepcopy(songs)
    for song in result:
        song.popularity = popularities.get(song.spotify_id, 0) if song.spotify_id else 0
    return result


def sort_songs(songs: List[Song], sort_by: str = "streams", sort_order: str = "desc") -> List[Song]:
    key = SORT_FIELDS.get(sort_by)
    if key is None:
        return list(songs)
    return sorted(songs, key=key, reverse=sort_order != "asc")


def list_songs(client: SpotifyClient, sort_by: str = "streams", sort_order: str = "desc",
               songs: List[Song] = SONGS, sleep: Callable[[float], None] = time.sleep) -> List[Song]:
    popularities = fetch_popularities(client, fetchable_ids(songs), sleep=sleep)
    return sort_songs(with_popularity(songs, popularities), sort_by, sort_order)
