from dataclasses import dataclass
from typing import Optional


@dataclass
class TrackDetails:
    name: str
    popularity: int
    artist: str
    album: str
    preview_url: Optional[str]
    uri: str


@dataclass
class Song:
    name: str
    streams: int
    key: str
    bpm: int
    spotify_id: str
    popularity: int = 0

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'streams': self.streams,
            'key': self.key,
            'bpm': self.bpm,
            'spotifyId': self.spotify_id,
            'popularity': self.popularity,
        }


@dataclass
class AuthResult:
    access_token: str
    refreshed: bool = False
