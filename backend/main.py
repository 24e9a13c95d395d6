# backend/main.py
import logging
from dataclasses import asdict
from typing import List, Union

from fastapi import Cookie, Depends, FastAPI, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from backend.spotify_auth.auth_gate import AuthGate
from backend.spotify_auth.catalog import list_songs
from backend.spotify_auth.client import SpotifyClient
from backend.spotify_auth.config import SpotifyConfig, get_config
from backend.spotify_auth.errors import (
    AuthenticationFailed,
    BadRequest,
    ProxyError,
    SpotifyApiError,
    Unauthorized,
)
from backend.spotify_auth.login import (
    STATE_COOKIE,
    STATE_MAX_AGE,
    build_authorize_url,
    generate_state,
    state_matches,
)
from backend.spotify_auth.tokens import ClientCredentialsCache, exchange_code
from backend.spotify_auth.tracks import fetch_track_details

logger = logging.getLogger(__name__)

# App token for catalog reads, shared across requests
app_token_cache = ClientCredentialsCache()


def get_token_cache() -> ClientCredentialsCache:
    return app_token_cache


app = FastAPI()
app.add_middleware(
    CORSMiddleware,
    allow_origins=[SpotifyConfig.from_env().frontend_origin],
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Origin", "Content-Type", "Accept"],
    max_age=12 * 60 * 60,
)


# Pydantic models for response validation
class TrackDetailsResponse(BaseModel):
    name: str
    popularity: int
    artist: str
    album: str
    preview_url: Union[str, None] = None
    uri: str


class SongResponse(BaseModel):
    name: str
    streams: int
    key: str
    bpm: int
    spotifyId: str
    popularity: int


@app.exception_handler(ProxyError)
async def proxy_error_handler(request: Request, exc: ProxyError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _set_token_cookie(response: Response, name: str, value: str, config: SpotifyConfig) -> None:
    response.set_cookie(name, value, httponly=True, path="/", secure=config.cookie_secure, samesite="lax")


@app.get("/api/test_ping")
def test_ping():
    return {"ok": True, "method": "GET"}


@app.get("/api/login")
def login(config: SpotifyConfig = Depends(get_config)):
    """Redirect the browser to Spotify's authorize page"""
    state = generate_state()
    response = RedirectResponse(build_authorize_url(config, state), status_code=302)
    response.set_cookie(
        STATE_COOKIE, state, max_age=STATE_MAX_AGE, httponly=True, path="/",
        secure=config.cookie_secure, samesite="lax",
    )
    return response


def complete_login(
    code: str,
    state: Union[str, None],
    stored_state: Union[str, None],
    config: SpotifyConfig,
) -> Response:
    if not state_matches(stored_state, state):
        logger.warning("[complete_login] state mismatch on callback")
        mismatch = JSONResponse(status_code=400, content=BadRequest("State mismatch").to_dict())
        mismatch.delete_cookie(STATE_COOKIE, path="/")
        return mismatch

    try:
        tokens = exchange_code(config, code)
    except SpotifyApiError as e:
        logger.error(f"[complete_login] code exchange failed: status={e.status_code} {e}")
        raise AuthenticationFailed() from e

    response = RedirectResponse(config.post_login_redirect, status_code=302)
    _set_token_cookie(response, "access_token", tokens.access_token, config)
    if tokens.refresh_token:
        _set_token_cookie(response, "refresh_token", tokens.refresh_token, config)
    response.delete_cookie(STATE_COOKIE, path="/")
    logger.info(f"[complete_login] login complete, access token {tokens.access_token[:8]}...")
    return response


@app.get("/api/callback", response_model=TrackDetailsResponse)
def callback(
    response: Response,
    trackId: Union[str, None] = Query(None),
    code: Union[str, None] = Query(None),
    state: Union[str, None] = Query(None),
    error: Union[str, None] = Query(None),
    access_token: Union[str, None] = Cookie(None),
    refresh_token: Union[str, None] = Cookie(None),
    spotify_auth_state: Union[str, None] = Cookie(None),
    config: SpotifyConfig = Depends(get_config),
):
    """Finish the OAuth login, or return track details with a validated (and possibly refreshed) token"""
    if error:
        logger.warning(f"[callback] authorization denied: {error}")
        raise Unauthorized("Authorization denied")
    if code:
        return complete_login(code, state, spotify_auth_state, config)

    if not access_token:
        raise Unauthorized()
    if not trackId:
        raise BadRequest("Track ID is required")

    gate = AuthGate(config)
    auth = gate.authenticate(access_token, refresh_token)
    if auth.refreshed:
        _set_token_cookie(response, "access_token", auth.access_token, config)

    try:
        details = gate.fetch_track(trackId)
    except ProxyError as exc:
        # a refreshed token reaches the caller even when the fetch fails
        failed = JSONResponse(status_code=exc.status_code, content=exc.to_dict())
        if auth.refreshed:
            _set_token_cookie(failed, "access_token", auth.access_token, config)
        return failed
    return asdict(details)


@app.get("/api/streams", response_model=TrackDetailsResponse)
def streams(
    trackId: Union[str, None] = Query(None),
    access_token: Union[str, None] = Cookie(None),
    config: SpotifyConfig = Depends(get_config),
):
    """Track details using the caller's access token as-is"""
    if not access_token:
        raise Unauthorized()
    if not trackId:
        raise BadRequest("Track ID is required")

    client = SpotifyClient(access_token, api_url=config.api_url, timeout=config.timeout)
    return asdict(fetch_track_details(client, trackId))


@app.get("/api/songs", response_model=List[SongResponse])
def get_songs(
    sortBy: str = Query("streams"),
    sortOrder: str = Query("desc"),
    config: SpotifyConfig = Depends(get_config),
    token_cache: ClientCredentialsCache = Depends(get_token_cache),
):
    """Release catalog with current Spotify popularity, sorted"""
    try:
        app_token = token_cache.get_token(config)
    except SpotifyApiError as e:
        logger.error(f"[get_songs] Error getting Spotify access token: {e}")
        return JSONResponse(status_code=500, content={"error": "Could not authenticate with Spotify"})

    client = SpotifyClient(app_token, api_url=config.api_url, timeout=config.timeout)
    songs = list_songs(client, sortBy, sortOrder)
    return [song.to_dict() for song in songs]
