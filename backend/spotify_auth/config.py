import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env.local from the backend directory
load_dotenv(dotenv_path=os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), '.env.local'))

AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_API = "https://api.spotify.com/v1"

LOGIN_SCOPES = (
    "user-read-private",
    "user-read-email",
    "user-read-currently-playing",
    "user-read-playback-state",
)


@dataclass(frozen=True)
class SpotifyConfig:
    client_id: str
    client_secret: str
    redirect_uri: str
    post_login_redirect: str = "/"
    frontend_origin: str = "http://localhost:3000"
    timeout: float = 10.0
    cookie_secure: bool = False
    authorize_url: str = AUTHORIZE_URL
    token_url: str = TOKEN_URL
    api_url: str = SPOTIFY_API

    @property
    def scope(self) -> str:
        return " ".join(LOGIN_SCOPES)

    @classmethod
    def from_env(cls) -> "SpotifyConfig":
        """Build the config from process environment variables."""
        return cls(
            client_id=os.getenv("SPOTIFY_CLIENT_ID", ""),
            client_secret=os.getenv("SPOTIFY_CLIENT_SECRET", ""),
            redirect_uri=os.getenv("SPOTIFY_REDIRECT_URI", ""),
            post_login_redirect=os.getenv("POST_LOGIN_REDIRECT", "/"),
            frontend_origin=os.getenv("FRONTEND_ORIGIN", "http://localhost:3000"),
            timeout=float(os.getenv("SPOTIFY_HTTP_TIMEOUT", "10")),
            cookie_secure=os.getenv("COOKIE_SECURE", "0").strip().lower() in {"1", "true", "yes", "on"},
        )


def get_config() -> SpotifyConfig:
    """FastAPI dependency; overridden in tests."""
    return SpotifyConfig.from_env()
