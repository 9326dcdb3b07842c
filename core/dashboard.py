# core/dashboard.py
from typing import Callable, List, Optional

from .config import DEFAULT_PERIOD, PERIODS, Settings, load_settings
from .debug import debug_log
from .enrichment import EnrichmentPool
from .errors import ConfigurationError
from .image_resolver import ImageResolver
from .lastfm_client import LastFmClient
from .models import Series, SnapshotEvent, usable_artwork
from .now_playing import NowPlayingTracker
from .paging import PagedFetcher
from .scheduler import RefreshScheduler
from .series import SeriesController

StatusListener = Callable[[str], None]


class DashboardCore:
    """
    Wires the two series, the artwork pool, the now-playing tracker and the
    auto-refresh timer together. Without settings the core stays disabled and
    every fetch is a no-op.
    """

    def __init__(self, settings: Optional[Settings], client=None,
                 config_error: Optional[ConfigurationError] = None):
        self.settings = settings
        self.config_error = config_error
        self.enabled = settings is not None
        self.period = settings.period if settings else DEFAULT_PERIOD
        self.page_size = settings.page_size if settings else 50

        if self.enabled and client is None:
            client = LastFmClient.from_settings(settings)
        self.client = client
        self.fetcher = PagedFetcher(client) if client is not None else None

        self.tracks = SeriesController(Series.TRACKS, self._fetch_tracks)
        self.artists = SeriesController(Series.ARTISTS, self._fetch_artists)
        self.tracks.enabled = self.artists.enabled = self.enabled

        self.resolver = ImageResolver.for_client(client) if client is not None else None
        self.pool = EnrichmentPool(self.resolver) if self.resolver is not None else None
        self.now_playing = NowPlayingTracker()

        self.scheduler = RefreshScheduler(
            [self.tracks, self.artists],
            interval=settings.refresh_seconds if settings else 20,
        )

        self._status_listeners: List[StatusListener] = []

        self.tracks.add_snapshot_listener(self._on_tracks_snapshot)
        self.artists.add_snapshot_listener(self._on_artists_snapshot)
        self.tracks.add_status_listener(self._on_series_status)
        self.artists.add_status_listener(self._on_series_status)

    @classmethod
    def from_config(cls, path=None) -> "DashboardCore":
        try:
            settings = load_settings(path)
        except ConfigurationError as e:
            debug_log(f"Config error: {e}")
            return cls(None, config_error=e)
        return cls(settings)

    # -----------------------------
    # Listeners
    # -----------------------------

    def add_status_listener(self, listener: StatusListener):
        self._status_listeners.append(listener)

    def add_snapshot_listener(self, listener: Callable[[SnapshotEvent], None]):
        self.tracks.add_snapshot_listener(listener)
        self.artists.add_snapshot_listener(listener)

    def add_artwork_listener(self, listener: Callable[[str, str], None]):
        if self.pool is not None:
            self.pool.add_listener(listener)

    def add_now_playing_listener(self, listener):
        self.now_playing.add_listener(listener)

    def _emit_status(self, message: str):
        for listener in list(self._status_listeners):
            try:
                listener(message)
            except Exception as e:
                debug_log(f"Status listener failed: {e}")

    # -----------------------------
    # Series plumbing
    # -----------------------------

    def _fetch_tracks(self, page: int):
        return self.fetcher.fetch(Series.TRACKS, page=page, limit=self.page_size)

    def _fetch_artists(self, page: int):
        return self.fetcher.fetch(Series.ARTISTS, page=page, limit=self.page_size, period=self.period)

    def _on_tracks_snapshot(self, event: SnapshotEvent):
        self.now_playing.update(event.items)

    def _on_artists_snapshot(self, event: SnapshotEvent):
        if self.pool is not None:
            self.pool.enrich(event.new_items)

    def _on_series_status(self, series: Series, message: str):
        self._emit_status(message)

    # -----------------------------
    # Operations
    # -----------------------------

    def start(self):
        if not self.enabled:
            self._emit_status(f"Config error: {self.config_error}" if self.config_error else "Not configured")
            return
        self._emit_status(f"Loaded configuration. Auto-refresh every {self.scheduler.interval}s.")
        self.scheduler.start()
        self.refresh_all()

    def stop(self):
        self.scheduler.stop()
        self.tracks.shutdown()
        self.artists.shutdown()
        if self.pool is not None:
            self.pool.shutdown()

    def refresh_all(self) -> bool:
        if not self.enabled or self.tracks.busy or self.artists.busy:
            return False
        self.tracks.refresh()
        self.artists.refresh()
        return True

    def load_more(self) -> bool:
        return self.tracks.load_more() is not None

    def set_refresh_interval(self, seconds: int):
        self.scheduler.set_interval(seconds)

    def set_period(self, period: str) -> bool:
        if period not in PERIODS:
            raise ValueError(f"period must be one of {PERIODS}, got {period!r}")
        if period == self.period:
            return False
        self.period = period
        return self.artists.refresh() is not None

    def artwork_for(self, name: str, row_url: Optional[str] = None) -> Optional[str]:
        """Cache first, then the row's own URL; placeholders count as nothing."""
        cached = self.resolver.cache.get(name) if self.resolver is not None else None
        return usable_artwork(cached) or usable_artwork(row_url)
