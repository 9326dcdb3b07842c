# core/models.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, Optional, Tuple, TypeVar

# Last.fm serves this image when it has nothing real for an artist.
NO_IMAGE_HASH = "2a96cbd8b46e442fc41c2b86b821562f"

T = TypeVar("T")


def is_missing_artwork(url: Optional[str]) -> bool:
    if not url or not url.strip():
        return True
    return NO_IMAGE_HASH in url


def usable_artwork(url: Optional[str]) -> Optional[str]:
    return None if is_missing_artwork(url) else url


class Series(str, Enum):
    TRACKS = "tracks"
    ARTISTS = "artists"


@dataclass(frozen=True)
class TrackEntry:
    title: str
    artist: str
    album: str
    played_at: Optional[datetime] = None
    is_live_now: bool = False
    artwork_url: Optional[str] = None


@dataclass(frozen=True)
class ArtistEntry:
    name: str
    play_count: int = 0
    artwork_url: Optional[str] = None


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Tuple[T, ...]
    page: int = 1
    total_pages: int = 1
    per_page: int = 50
    total: int = 0


@dataclass(frozen=True)
class SeriesState:
    current_page: int = 1
    total_pages: int = 1
    items: Tuple = ()
    busy: bool = False

    @property
    def has_more(self) -> bool:
        return self.current_page < self.total_pages


@dataclass(frozen=True)
class SnapshotEvent:
    series: Series
    items: Tuple
    current_page: int
    total_pages: int
    appended: bool = False
    new_items: Tuple = field(default_factory=tuple)
