from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from salesboard.settings import RESIZE_DEBOUNCE_SECONDS


logger = logging.getLogger(__name__)


class Debouncer:
    """Runs ``callback`` once calls to ``trigger`` stop for ``delay`` seconds.

    Each trigger cancels the pending timer and starts a new one.
    """

    def __init__(
        self,
        callback: Callable[[], Any],
        delay: float = RESIZE_DEBOUNCE_SECONDS,
        timer_factory: Callable[..., Any] = threading.Timer,
    ) -> None:
        self._callback = callback
        self._delay = delay
        self._timer_factory = timer_factory
        self._timer: Optional[Any] = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def trigger(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = self._timer_factory(self._delay, self._fire, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A later trigger superseded this timer.
            if generation != self._generation or self._timer is None:
                return
            self._timer = None
        try:
            self._callback()
        except Exception:
            logger.exception("Debounced callback failed")
