"""Scheduling helpers: debounce, throttle and cancellable location tracking."""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from .errors import ProviderError

if TYPE_CHECKING:  # pragma: no cover
    from .providers.base import GeocodeProvider, LocationProvider, SearchResult, SeekerPosition

logger = logging.getLogger(__name__)


class Throttle:
    """Enforces a minimum interval between consecutive calls to :meth:`wait`."""

    def __init__(
        self,
        min_interval_s: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval_s = min_interval_s
        self._clock = clock
        self._sleep = sleep
        self._last: Optional[float] = None
        self._lock = threading.Lock()

    def wait(self) -> None:
        with self._lock:
            if self._last is not None:
                elapsed = self._clock() - self._last
                if elapsed < self.min_interval_s:
                    self._sleep(self.min_interval_s - elapsed)
            self._last = self._clock()


class DebouncedTask:
    """Single-flight delayed call: every :meth:`trigger` replaces the pending one."""

    def __init__(self, func: Callable[..., Any], delay_s: float = 0.3) -> None:
        self._func = func
        self.delay_s = delay_s
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0

    def trigger(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            generation = self._generation
            self._timer = threading.Timer(self.delay_s, self._fire, args=(generation, args, kwargs))
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._generation += 1

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def _fire(self, generation: int, args: tuple, kwargs: dict) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
        self._func(*args, **kwargs)


class TrackingHandle:
    """Polling subscription to a location provider.

    Updates are delivered from a daemon thread. Once :meth:`stop` returns no
    further update reaches *on_update*.
    """

    def __init__(
        self,
        provider: LocationProvider,
        on_update: Callable[[SeekerPosition], None],
        *,
        interval_s: float = 5.0,
        timeout_s: float = 12.0,
    ) -> None:
        self._provider = provider
        self._on_update = on_update
        self.interval_s = interval_s
        self.timeout_s = timeout_s
        self._stop_event = threading.Event()
        self._deliver_lock = threading.RLock()
        self._stopped = False
        self._thread: Optional[threading.Thread] = None
        self.updates = 0
        self.errors = 0

    def start(self) -> "TrackingHandle":
        if self._thread is not None:
            raise RuntimeError("tracking already started")
        self._thread = threading.Thread(target=self._run, name="seekarea-tracking", daemon=True)
        self._thread.start()
        logger.info("Location tracking started (interval %.1fs)", self.interval_s)
        return self

    @property
    def active(self) -> bool:
        return self._thread is not None and not self._stopped

    def stop(self) -> None:
        self._stop_event.set()
        with self._deliver_lock:
            self._stopped = True
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.timeout_s)
        logger.info("Location tracking stopped after %d update(s)", self.updates)

    def _run(self) -> None:
        try:
            while not self._stop_event.is_set():
                try:
                    position = self._provider.current_position(self.timeout_s)
                except Exception as exc:
                    self.errors += 1
                    logger.warning("Location update failed: %s", exc)
                else:
                    with self._deliver_lock:
                        if self._stopped:
                            break
                        self._on_update(position)
                        self.updates += 1
                if self._stop_event.wait(self.interval_s):
                    break
        finally:
            with self._deliver_lock:
                self._stopped = True


class SearchController:
    """Search-as-you-type: debounced input, throttled geocoder requests."""

    def __init__(
        self,
        geocoder: GeocodeProvider,
        on_results: Callable[[List[SearchResult]], None],
        *,
        delay_s: float = 0.3,
        throttle: Optional[Throttle] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        self._geocoder = geocoder
        self._on_results = on_results
        self._on_error = on_error
        self._throttle = throttle or Throttle(1.0)
        self._task = DebouncedTask(self.search_now, delay_s)

    def on_input(self, text: str) -> None:
        self._task.trigger(text)

    def cancel(self) -> None:
        self._task.cancel()

    def search_now(self, text: str) -> None:
        query = text.strip()
        if not query:
            self._on_results([])
            return
        self._throttle.wait()
        try:
            results = self._geocoder.search(query)
        except ProviderError as exc:
            logger.warning("Search for %r failed: %s", query, exc)
            if self._on_error is not None:
                self._on_error(exc)
            self._on_results([])
            return
        self._on_results(results)


__all__ = ["DebouncedTask", "SearchController", "Throttle", "TrackingHandle"]
