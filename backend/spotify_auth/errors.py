from typing import Optional


class SpotifyApiError(Exception):
    """Raised by the client layer when a Spotify call fails.

    ``status_code`` is ``None`` when the request never got a response
    (connection error, timeout).
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = "",
                 headers: Optional[dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.headers = headers or {}

    @property
    def retry_after(self) -> Optional[int]:
        value = self.headers.get("Retry-After")
        try:
            return int(value) if value is not None else None
        except (TypeError, ValueError):
            return None

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class ProxyError(Exception):
    """Base class for errors rendered to the caller as ``{"error": ...}``."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class Unauthorized(ProxyError):
    status_code = 401
    message = "Unauthorized"


class BadRequest(ProxyError):
    status_code = 400
    message = "Bad request"


class AuthenticationFailed(ProxyError):
    status_code = 500
    message = "Authentication failed"


class UpstreamFetchFailed(ProxyError):
    status_code = 500
    message = "Failed to fetch track data"

    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    NETWORK = "network"
    UPSTREAM = "upstream"

    def __init__(self, kind: str = UPSTREAM, message: Optional[str] = None):
        super().__init__(message)
        self.kind = kind

    @classmethod
    def from_api_error(cls, error: SpotifyApiError) -> "UpstreamFetchFailed":
        kinds = {404: cls.NOT_FOUND, 429: cls.RATE_LIMITED, 401: cls.UNAUTHORIZED}
        if error.status_code is None:
            return cls(cls.NETWORK)
        return cls(kinds.get(error.status_code, cls.UPSTREAM))

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind}
