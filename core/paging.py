# core/paging.py
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from .config import DEFAULT_PAGE_SIZE, DEFAULT_PERIOD
from .debug import debug_log
from .errors import TransientFetchError
from .lastfm_client import LastFmClient, pick_best_image_url
from .models import ArtistEntry, Page, Series, TrackEntry

FetchResult = Union[Page, TransientFetchError]


def safe_int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def _as_list(value: Any) -> List[Dict[str, Any]]:
    # A single result comes back as an object instead of a one-item list.
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        return [v for v in value if isinstance(v, dict)]
    return []


def _text(value: Any) -> str:
    if isinstance(value, dict):
        return str(value.get("#text") or "")
    return "" if value is None else str(value)


def parse_uts(value: Any) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(int(str(value).strip()), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def parse_track(raw: Dict[str, Any]) -> TrackEntry:
    artist = raw.get("artist")
    if isinstance(artist, dict):
        artist_name = (artist.get("name") or "").strip() or (artist.get("#text") or "").strip()
    else:
        artist_name = _text(artist)

    attr = raw.get("@attr") or {}
    live = isinstance(attr, dict) and str(attr.get("nowplaying", "")).lower() == "true"

    played_at = None
    if not live:
        date = raw.get("date")
        if isinstance(date, dict) and str(date.get("uts") or "").strip():
            played_at = parse_uts(date.get("uts"))

    return TrackEntry(
        title=_text(raw.get("name")),
        artist=artist_name,
        album=_text(raw.get("album")),
        played_at=played_at,
        is_live_now=live,
        artwork_url=pick_best_image_url(raw.get("image")) or None,
    )


def parse_artist(raw: Dict[str, Any]) -> ArtistEntry:
    return ArtistEntry(
        name=_text(raw.get("name")),
        play_count=max(0, safe_int(raw.get("playcount"), 0)),
        artwork_url=pick_best_image_url(raw.get("image")) or None,
    )


def dedupe_artists(rows: List[ArtistEntry]) -> List[ArtistEntry]:
    """Last write wins per name, keeping the position of the first occurrence."""
    by_name: Dict[str, ArtistEntry] = {}
    for row in rows:
        by_name[row.name] = row
    return list(by_name.values())


def build_page(block: Any, list_key: str, parse: Callable, limit: int, page: int) -> Page:
    if not isinstance(block, dict) or list_key not in block:
        return Page(items=(), page=1, total_pages=1, per_page=limit, total=0)

    attr = block.get("@attr")
    if not isinstance(attr, dict):
        attr = {}

    total_pages = max(1, safe_int(attr.get("totalPages"), 1))
    current = safe_int(attr.get("page"), page)
    if current < 1 or current > total_pages:
        # Malformed paging block: fall back to a single page.
        debug_log(f"Paging block out of range (page={current}, totalPages={total_pages}); resetting")
        current, total_pages = 1, 1

    items = [parse(raw) for raw in _as_list(block.get(list_key))]
    return Page(
        items=tuple(items),
        page=current,
        total_pages=total_pages,
        per_page=safe_int(attr.get("perPage"), limit),
        total=max(0, safe_int(attr.get("total"), 0)),
    )


class PagedFetcher:
    """
    Fetches one page of one series and normalizes it. Failures come back as
    TransientFetchError values; nothing is raised to the caller.
    """

    def __init__(self, client: LastFmClient):
        self.client = client

    def fetch(self, series: Series, page: int = 1, limit: int = DEFAULT_PAGE_SIZE,
              period: str = DEFAULT_PERIOD) -> FetchResult:
        if limit <= 0:
            limit = DEFAULT_PAGE_SIZE
        if page <= 0:
            page = 1
        if not period or not period.strip():
            period = DEFAULT_PERIOD

        try:
            if series == Series.TRACKS:
                data = self.client.recent_tracks(limit, page)
                return build_page(data.get("recenttracks"), "track", parse_track, limit, page)

            data = self.client.top_artists(period, limit, page)
            result = build_page(data.get("topartists"), "artist", parse_artist, limit, page)
            return Page(
                items=tuple(dedupe_artists(list(result.items))),
                page=result.page,
                total_pages=result.total_pages,
                per_page=result.per_page,
                total=result.total,
            )
        except TransientFetchError as e:
            debug_log(f"{series.value} page {page} failed: {e}")
            return e
        except (AttributeError, TypeError, ValueError) as e:
            debug_log(f"{series.value} page {page} malformed: {e}")
            return TransientFetchError(f"Malformed {series.value} reply: {e}")
