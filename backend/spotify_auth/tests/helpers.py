from unittest.mock import Mock


def make_response(status_code: int = 200, json_body=None, headers=None, text: str = "") -> Mock:
    """Build a stand-in for a ``requests.Response``."""
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = json_body if json_body is not None else {}
    response.headers = headers or {}
    response.text = text or str(json_body)
    return response


def make_html_response(status_code: int = 200) -> Mock:
    """A response whose body is not JSON, like a gateway error page."""
    response = make_response(status_code, text="<html>Bad Gateway</html>")
    response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
    return response


def make_track(track_id: str = "54Ew6UcuXLChTnSAwXAIXY", artists=("Aguava",), popularity: int = 42) -> dict:
    return {
        "id": track_id,
        "name": "If I",
        "popularity": popularity,
        "artists": [{"name": name} for name in artists],
        "album": {"name": "If I - Single"},
        "preview_url": "https://p.scdn.co/mp3-preview/abc",
        "uri": f"spotify:track:{track_id}",
    }
