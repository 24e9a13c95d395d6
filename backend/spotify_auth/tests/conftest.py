"""Shared fixtures for the spotify_auth tests."""

import pytest

from ..config import SpotifyConfig


@pytest.fixture
def config() -> SpotifyConfig:
    return SpotifyConfig(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="http://localhost:3000/api/callback",
        post_login_redirect="/releases",
    )
