# core/series.py
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace
from typing import Callable, List, Optional

from .debug import debug_log
from .errors import TransientFetchError
from .models import Page, Series, SeriesState, SnapshotEvent

PageFetch = Callable[[int], object]  # page -> Page | TransientFetchError
SnapshotListener = Callable[[SnapshotEvent], None]
StatusListener = Callable[[Series, str], None]


class SeriesController:
    """
    Owns the paging cursor and item snapshot of one series.

    At most one fetch is in flight: refresh() and load_more() return None
    without touching the network while the series is busy. Results come back
    to _complete(), the only place the state is replaced.
    """

    def __init__(self, series: Series, fetch_page: PageFetch,
                 executor: Optional[ThreadPoolExecutor] = None):
        self.series = series
        self._fetch_page = fetch_page
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"lastfm-{series.value}"
        )
        self._lock = threading.Lock()
        self._state = SeriesState()
        self._snapshot_listeners: List[SnapshotListener] = []
        self._status_listeners: List[StatusListener] = []
        self.enabled = True

    @property
    def state(self) -> SeriesState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state.busy

    @property
    def items(self):
        return self._state.items

    def add_snapshot_listener(self, listener: SnapshotListener):
        self._snapshot_listeners.append(listener)

    def add_status_listener(self, listener: StatusListener):
        self._status_listeners.append(listener)

    def refresh(self) -> Optional[Future]:
        return self._start(page=1, replace_items=True)

    def load_more(self) -> Optional[Future]:
        return self._start(page=None, replace_items=False)

    def _start(self, page: Optional[int], replace_items: bool) -> Optional[Future]:
        with self._lock:
            if not self.enabled or self._state.busy:
                return None
            if not replace_items:
                if not self._state.has_more:
                    return None
                page = self._state.current_page + 1
            self._state = replace(self._state, busy=True)

        debug_log(f"{self.series.value}: fetching page {page} ({'replace' if replace_items else 'append'})")
        try:
            return self._executor.submit(self._run, page, replace_items)
        except RuntimeError:
            with self._lock:
                self._state = replace(self._state, busy=False)
            return None

    def _run(self, page: int, replace_items: bool) -> bool:
        try:
            result = self._fetch_page(page)
        except Exception as e:
            result = TransientFetchError(f"{self.series.value} fetch crashed: {e}")
        return self._complete(result, replace_items)

    def _complete(self, result, replace_items: bool) -> bool:
        if not isinstance(result, Page):
            with self._lock:
                # Snapshot and cursor stay as they were.
                self._state = replace(self._state, busy=False)
            message = str(result) if result is not None else "empty reply"
            debug_log(f"{self.series.value}: fetch failed: {message}")
            self._emit_status(f"Failed to load {self.series.value}: {message}")
            return False

        with self._lock:
            if replace_items:
                items = tuple(result.items)
            else:
                items = self._state.items + tuple(result.items)
            total_pages = max(1, result.total_pages)
            self._state = SeriesState(
                current_page=result.page,
                total_pages=total_pages,
                items=items,
                busy=False,
            )
            event = SnapshotEvent(
                series=self.series,
                items=items,
                current_page=result.page,
                total_pages=total_pages,
                appended=not replace_items,
                new_items=tuple(result.items),
            )

        for listener in list(self._snapshot_listeners):
            try:
                listener(event)
            except Exception as e:
                debug_log(f"{self.series.value}: snapshot listener failed: {e}")
        return True

    def _emit_status(self, message: str):
        for listener in list(self._status_listeners):
            try:
                listener(self.series, message)
            except Exception as e:
                debug_log(f"{self.series.value}: status listener failed: {e}")

    def shutdown(self, wait: bool = False):
        self._executor.shutdown(wait=wait, cancel_futures=True)
