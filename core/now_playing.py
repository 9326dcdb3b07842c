# core/now_playing.py
import threading
from typing import Callable, Iterable, List, Optional

from .debug import debug_log
from .models import TrackEntry

NowPlayingListener = Callable[[Optional[TrackEntry]], None]


def find_now_playing(items: Iterable[TrackEntry]) -> Optional[TrackEntry]:
    for entry in items:
        if entry is not None and entry.is_live_now:
            return entry
    return None


class NowPlayingTracker:
    def __init__(self):
        self._lock = threading.Lock()
        self._current: Optional[TrackEntry] = None
        self._listeners: List[NowPlayingListener] = []

    @property
    def current(self) -> Optional[TrackEntry]:
        return self._current

    def add_listener(self, listener: NowPlayingListener):
        self._listeners.append(listener)

    def update(self, items: Iterable[TrackEntry]) -> Optional[TrackEntry]:
        now = find_now_playing(items)
        with self._lock:
            changed = now != self._current
            self._current = now
        if changed:
            debug_log(f"Now playing: {now.title} — {now.artist}" if now else "Now playing: nothing")
            for listener in list(self._listeners):
                try:
                    listener(now)
                except Exception as e:
                    debug_log(f"Now-playing listener failed: {e}")
        return now
