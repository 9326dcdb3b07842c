# core/scheduler.py
import threading
from typing import Optional, Sequence

from .config import DEFAULT_REFRESH_SECONDS, REFRESH_CHOICES
from .debug import debug_log
from .series import SeriesController

JOIN_TIMEOUT = 2.0


class RefreshScheduler:
    """
    Refreshes every series on a fixed interval. A tick that finds any series
    still busy is dropped; the next attempt is one interval later.
    """

    def __init__(self, controllers: Sequence[SeriesController],
                 interval: int = DEFAULT_REFRESH_SECONDS):
        self._controllers = list(controllers)
        self._interval = self._validate(interval)
        self._lock = threading.Lock()
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @staticmethod
    def _validate(seconds: int) -> int:
        if seconds not in REFRESH_CHOICES:
            raise ValueError(f"refresh interval must be one of {REFRESH_CHOICES}, got {seconds!r}")
        return seconds

    @property
    def interval(self) -> int:
        return self._interval

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        with self._lock:
            self._stop_locked()
            stop = threading.Event()
            thread = threading.Thread(
                target=self._loop,
                args=(stop, self._interval),
                name="refresh-scheduler",
                daemon=True,
            )
            self._stop_event = stop
            self._thread = thread
            thread.start()
        debug_log(f"Auto-refresh every {self._interval}s")

    def stop(self):
        with self._lock:
            self._stop_locked()

    def _stop_locked(self):
        if self._stop_event is not None:
            self._stop_event.set()
        thread = self._thread
        self._stop_event = None
        self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(JOIN_TIMEOUT)
            if thread.is_alive():
                debug_log("Previous auto-refresh loop did not exit in time")

    def set_interval(self, seconds: int):
        """Restarts the timer if running; the first tick comes one full interval later."""
        self._interval = self._validate(seconds)
        if self.running:
            self.start()

    def _loop(self, stop: threading.Event, interval: int):
        while not stop.wait(interval):
            self.tick()

    def tick(self) -> bool:
        try:
            busy = [c.series.value for c in self._controllers if c.busy]
            if busy:
                debug_log(f"Auto-refresh skipped, still busy: {', '.join(busy)}")
                return False
            for controller in self._controllers:
                controller.refresh()
            return True
        except Exception as e:
            debug_log(f"Auto-refresh tick failed: {e}")
            return False
