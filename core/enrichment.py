# core/enrichment.py
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, Set

from .debug import debug_log
from .errors import EnrichmentFailure
from .image_resolver import ImageResolver
from .models import ArtistEntry, is_missing_artwork

POOL_SIZE = 4

ArtworkListener = Callable[[str, str], None]


class EnrichmentPool:
    """
    Resolves missing artist artwork in the background. One artist name is
    never resolved by two workers at once, and never again once cached.
    """

    def __init__(self, resolver: ImageResolver, max_workers: int = POOL_SIZE,
                 executor: Optional[ThreadPoolExecutor] = None):
        self.resolver = resolver
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="lastfm-artwork"
        )
        self._lock = threading.Lock()
        self._in_flight: Set[str] = set()
        self._listeners: List[ArtworkListener] = []

    def add_listener(self, listener: ArtworkListener):
        self._listeners.append(listener)

    def in_flight(self) -> Set[str]:
        with self._lock:
            return set(self._in_flight)

    def enrich(self, rows: Iterable[ArtistEntry]) -> List[Future]:
        futures: List[Future] = []
        for row in rows:
            name = row.name
            if not name or not name.strip():
                continue
            if not is_missing_artwork(row.artwork_url):
                continue

            with self._lock:
                if name in self.resolver.cache or name in self._in_flight:
                    continue
                self._in_flight.add(name)
                try:
                    futures.append(self._executor.submit(self._resolve, name))
                except RuntimeError:
                    # Pool already shut down.
                    self._in_flight.discard(name)
                    break
        return futures

    def _resolve(self, name: str) -> Optional[str]:
        try:
            url = self.resolver.resolve_artist_art(name)
        except EnrichmentFailure as e:
            debug_log(str(e))
            return None
        except Exception as e:
            debug_log(f"Artwork worker crashed for '{name}': {e}")
            return None
        finally:
            with self._lock:
                self._in_flight.discard(name)

        if not url:
            return None

        for listener in list(self._listeners):
            try:
                listener(name, url)
            except Exception as e:
                debug_log(f"Artwork listener failed for '{name}': {e}")
        return url

    def shutdown(self, wait: bool = False):
        self._executor.shutdown(wait=wait, cancel_futures=True)
