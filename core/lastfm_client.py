# core/lastfm_client.py
from typing import Any, Dict, List, Optional

import requests

from .config import DEFAULT_PAGE_SIZE, DEFAULT_PERIOD, Settings
from .debug import debug_log
from .errors import TransientFetchError, truncate

API_BASE = "https://ws.audioscrobbler.com/2.0/"
USER_AGENT = "ScrobbleDash/1.0"
TIMEOUT = 10

# Operation failed, service offline, temporarily unavailable, rate limit exceeded.
TRANSIENT_API_ERRORS = {8, 11, 16, 29}

_HTTP = requests.Session()


def safe_error_code(value: Any) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def pick_best_image_url(images: Any) -> str:
    # Last.fm lists sizes small -> extralarge; the last non-blank one wins.
    if not isinstance(images, list):
        return ""
    for img in reversed(images):
        if isinstance(img, dict):
            text = (img.get("#text") or "").strip()
            if text:
                return text
    return ""


class LastFmClient:
    def __init__(self, api_key: str, username: str, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.username = username
        self.session = session or _HTTP
        self.session.headers.update({"User-Agent": USER_AGENT, "Accept": "application/json"})

    @classmethod
    def from_settings(cls, settings: Settings) -> "LastFmClient":
        return cls(settings.api_key, settings.username)

    def _get(self, method: str, **params) -> requests.Response:
        query = {"method": method, "api_key": self.api_key, "format": "json"}
        query.update(params)
        try:
            return self.session.get(API_BASE, params=query, timeout=TIMEOUT)
        except requests.RequestException as e:
            raise TransientFetchError(f"{method} failed: {e}") from e

    def _get_json(self, method: str, **params) -> Dict[str, Any]:
        r = self._get(method, **params)
        if r.status_code != 200:
            raise TransientFetchError(
                f"HTTP {r.status_code} from Last.fm: {truncate(r.text)}",
                status_code=r.status_code,
            )
        try:
            data = r.json()
        except ValueError as e:
            raise TransientFetchError(f"Malformed reply from Last.fm: {truncate(r.text)}") from e
        if not isinstance(data, dict):
            raise TransientFetchError(f"Malformed reply from Last.fm: {truncate(r.text)}")
        if "error" in data and "message" in data:
            # API-level errors come back as JSON, sometimes with a 200.
            raise TransientFetchError(f"Last.fm error {data.get('error')}: {truncate(str(data.get('message')))}")
        return data

    # -----------------------------
    # Paged series
    # -----------------------------

    def recent_tracks(self, limit: int = DEFAULT_PAGE_SIZE, page: int = 1) -> Dict[str, Any]:
        return self._get_json(
            "user.getrecenttracks",
            user=self.username,
            limit=limit,
            page=page,
            extended=1,
        )

    def top_artists(self, period: str = DEFAULT_PERIOD, limit: int = DEFAULT_PAGE_SIZE, page: int = 1) -> Dict[str, Any]:
        return self._get_json(
            "user.gettopartists",
            user=self.username,
            period=period,
            limit=limit,
            page=page,
        )

    # -----------------------------
    # Artist artwork
    # -----------------------------

    def _get_optional_json(self, method: str, **params) -> Optional[Dict[str, Any]]:
        """
        None means Last.fm definitively has nothing (unknown artist, other 4xx).
        Rate limits, 5xx and garbled bodies raise TransientFetchError.
        """
        r = self._get(method, **params)
        if r.status_code == 429 or r.status_code >= 500:
            raise TransientFetchError(
                f"HTTP {r.status_code} from Last.fm: {truncate(r.text)}",
                status_code=r.status_code,
            )
        data = None
        try:
            data = r.json()
        except ValueError as e:
            if r.status_code == 200:
                raise TransientFetchError(f"Malformed reply from Last.fm: {truncate(r.text)}") from e
        if isinstance(data, dict) and "error" in data:
            code = safe_error_code(data.get("error"))
            if code in TRANSIENT_API_ERRORS:
                raise TransientFetchError(f"Last.fm error {code}: {truncate(str(data.get('message')))}")
            debug_log(f"{method} error {code} for {params.get('artist')!r}: {data.get('message')}")
            return None
        if r.status_code != 200:
            debug_log(f"{method} returned HTTP {r.status_code} for {params.get('artist')!r}")
            return None
        return data if isinstance(data, dict) else None

    def artist_primary_image(self, name: str) -> str:
        if not name or not name.strip():
            return ""
        data = self._get_optional_json("artist.getinfo", artist=name, autocorrect=1)
        artist = (data or {}).get("artist")
        if not isinstance(artist, dict):
            return ""
        return pick_best_image_url(artist.get("image"))

    def artist_fallback_image(self, name: str) -> str:
        """Cover of the artist's top album, usually far more available than artist photos."""
        if not name or not name.strip():
            return ""
        data = self._get_optional_json("artist.gettopalbums", artist=name, limit=1, autocorrect=1)
        top = (data or {}).get("topalbums")
        albums: List[Any] = (top.get("album") if isinstance(top, dict) else None) or []
        if isinstance(albums, dict):
            albums = [albums]
        if not albums or not isinstance(albums[0], dict):
            return ""
        return pick_best_image_url(albums[0].get("image"))
