# lectures/services/loader.py
from __future__ import annotations

import datetime as dt
import logging
import threading
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from typing import Callable, Optional, Tuple

from lectures.errors import StaleResultError
from lectures.models import NormalizedResponse
from .aelf import get_readings

log = logging.getLogger("lectures.loader")

Key = Tuple[str, str]


class ReadingsLoader:
    """Runs fetches in the background and only hands back the current one.

    Each request is tagged with its (date, zone). When the selection moves on
    before a fetch completes, that fetch's result is dropped, and a fetch
    still queued behind others is cancelled.
    """

    def __init__(self, fetch: Callable[..., NormalizedResponse] = get_readings,
                 executor: Optional[ThreadPoolExecutor] = None):
        self._fetch = fetch
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="aelf")
        self._lock = threading.Lock()
        self._key: Optional[Key] = None
        self._future: Optional[Future] = None

    @staticmethod
    def key_for(day: dt.date | str, zone: str) -> Key:
        return (day.isoformat() if isinstance(day, dt.date) else str(day), zone)

    @property
    def current_key(self) -> Optional[Key]:
        return self._key

    def request(self, day: dt.date | str, zone: str, *, force: bool = False) -> Future:
        key = self.key_for(day, zone)
        with self._lock:
            if not force and key == self._key and self._future is not None:
                return self._future
            if self._future is not None and key != self._key:
                # queued fetches for a superseded key never start
                self._future.cancel()
            self._key = key
            fut = self._executor.submit(self._fetch, key[0], key[1])
            self._future = fut
        fut.add_done_callback(lambda f, k=key: self._on_done(k))
        return fut

    def _on_done(self, key: Key) -> None:
        if key != self._key:  # also reached for cancelled futures
            log.info("Discarding stale result for %s (zone: %s)", *key)

    def latest(self) -> Optional[NormalizedResponse]:
        """Result for the current key if it is ready, else None. Fetch errors are raised."""
        with self._lock:
            fut = self._future
        if fut is None or not fut.done():
            return None
        return fut.result()

    def wait(self, timeout: float | None = None) -> NormalizedResponse:
        with self._lock:
            key, fut = self._key, self._future
        if fut is None:
            raise StaleResultError("nothing requested yet")
        try:
            result = fut.result(timeout)
        except (CancelledError, Exception):
            if key != self._key:
                raise StaleResultError(f"selection changed while loading {key[0]}")
            raise
        if key != self._key:
            raise StaleResultError(f"selection changed while loading {key[0]}")
        return result

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)
