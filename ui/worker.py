# ui/worker.py
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Set

import requests
from PySide6.QtCore import QObject, Signal

from core.dashboard import DashboardCore
from core.debug import debug_log
from core.models import Series, SnapshotEvent


class SyncWorker(QObject):
    """
    Owns the sync core and re-emits its callbacks as Qt signals. The core
    calls back from its own worker threads; Qt queues the signals onto the
    GUI thread.
    """

    status = Signal(str)
    tracks_changed = Signal(object)     # SnapshotEvent
    artists_changed = Signal(object)    # SnapshotEvent
    artwork_resolved = Signal(str, str)  # artist name, url
    now_playing = Signal(object)        # TrackEntry or None

    def __init__(self, core: Optional[DashboardCore] = None, parent=None):
        super().__init__(parent)
        self.core = core or DashboardCore.from_config()

        self.core.add_status_listener(self.status.emit)
        self.core.add_snapshot_listener(self._on_snapshot)
        self.core.add_artwork_listener(self.artwork_resolved.emit)
        self.core.add_now_playing_listener(self.now_playing.emit)

    @property
    def enabled(self) -> bool:
        return self.core.enabled

    def _on_snapshot(self, event: SnapshotEvent):
        if event.series == Series.TRACKS:
            self.tracks_changed.emit(event)
        else:
            self.artists_changed.emit(event)

    def start(self):
        self.core.start()

    def stop(self):
        try:
            self.core.stop()
        except Exception as e:
            debug_log(f"Stopping sync core failed: {e}")

    def refresh(self) -> bool:
        started = self.core.refresh_all()
        if started:
            self.status.emit("Refreshing…")
        return started

    def load_more(self) -> bool:
        return self.core.load_more()

    def set_refresh_interval(self, seconds: int):
        self.core.set_refresh_interval(seconds)
        self.status.emit(f"Auto-refresh every {seconds}s")

    def set_period(self, period: str):
        self.core.set_period(period)


class ArtworkLoader(QObject):
    """Downloads image bytes off the GUI thread; each URL is requested once."""

    loaded = Signal(str, object)  # url, image bytes

    def __init__(self, max_workers: int = 4, parent=None):
        super().__init__(parent)
        self._http = requests.Session()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="artwork-download")
        self._requested: Set[str] = set()

    def request(self, url: str):
        if not url or url in self._requested:
            return
        self._requested.add(url)
        try:
            self._executor.submit(self._download, url)
        except RuntimeError:
            self._requested.discard(url)

    def _download(self, url: str):
        try:
            r = self._http.get(url, timeout=6)
            r.raise_for_status()
        except requests.RequestException as e:
            debug_log(f"Artwork download failed for {url}: {e}")
            return
        self.loaded.emit(url, r.content)

    def stop(self):
        self._executor.shutdown(wait=False, cancel_futures=True)
