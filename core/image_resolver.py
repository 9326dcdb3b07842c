# core/image_resolver.py
import os
import threading
from typing import Callable, Dict, Optional

from .errors import EnrichmentFailure, TransientFetchError
from .models import is_missing_artwork

# Cached value for "looked it up, nothing usable".
NO_ARTWORK = ""


def _art_debug_enabled() -> bool:
    return os.getenv("SCROBBLEDASH_ART_DEBUG", "").strip() in {"1", "true", "yes", "on"}


def _debug(msg: str):
    if _art_debug_enabled():
        print(f"[artwork] {msg}")


class ResolutionCache:
    """
    Artist name -> artwork URL (or NO_ARTWORK). Keys are case-sensitive and
    written once; nothing is evicted for the lifetime of the process.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[str, str] = {}

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            return self._entries.get(name, default)

    def put(self, name: str, url: Optional[str]) -> bool:
        value = NO_ARTWORK if is_missing_artwork(url) else url
        with self._lock:
            if name in self._entries:
                return False
            self._entries[name] = value
            return True


class ImageResolver:
    def __init__(
        self,
        fetch_primary: Callable[[str], str],
        fetch_fallback: Callable[[str], str],
        cache: Optional[ResolutionCache] = None,
    ):
        self._fetch_primary = fetch_primary
        self._fetch_fallback = fetch_fallback
        self.cache = cache if cache is not None else ResolutionCache()
        self._locks_guard = threading.Lock()
        self._name_locks: Dict[str, threading.Lock] = {}

    @classmethod
    def for_client(cls, client, cache: Optional[ResolutionCache] = None) -> "ImageResolver":
        return cls(client.artist_primary_image, client.artist_fallback_image, cache=cache)

    def _lock_for(self, name: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._name_locks.get(name)
            if lock is None:
                lock = threading.Lock()
                self._name_locks[name] = lock
            return lock

    def resolve_artist_art(self, name: str) -> str:
        """
        Returns a usable artwork URL or NO_ARTWORK. Raises EnrichmentFailure
        when a lookup failed transiently; nothing is cached in that case.
        """
        if not name:
            return NO_ARTWORK

        cached = self.cache.get(name)
        if cached is not None:
            return cached

        with self._lock_for(name):
            # Another caller may have finished while we waited.
            cached = self.cache.get(name)
            if cached is not None:
                return cached

            try:
                url = self._fetch_primary(name)
                if is_missing_artwork(url):
                    _debug(f"no artist image for '{name}', trying top album")
                    url = self._fetch_fallback(name)
            except TransientFetchError as e:
                raise EnrichmentFailure(name, e) from e

            if is_missing_artwork(url):
                _debug(f"no artwork at all for '{name}'")
                url = NO_ARTWORK
            else:
                _debug(f"resolved '{name}' -> {url}")

            self.cache.put(name, url)
            return url
