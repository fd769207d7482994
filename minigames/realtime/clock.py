"""
Minigame Engines - Game Clock

One tick per second for every subscribed engine. Engines never own a
timer: they expose `tick(seconds)` and the clock (or a test, or a
simulation loop) drives it.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from minigames.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

TickCallback = Callable[[int], None]


class GameClock:
    """Recurring tick source with an optional background thread.

    Subscribers run synchronously under `lock`; callers that act on an
    engine while the background thread is running should hold the same
    lock so a tick never interleaves with a player action.
    """

    def __init__(self, interval: float = 1.0) -> None:
        if interval <= 0:
            raise ValueError(f"Clock interval must be positive, got {interval}.")
        self.interval = interval
        self.lock = threading.RLock()
        self._subscribers: list[TickCallback] = []
        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "GameClock":
        """Clock ticking at the configured `clock_interval`."""
        settings = settings or get_settings()
        return cls(interval=settings.clock_interval)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: TickCallback) -> None:
        """Register a callback receiving the number of elapsed seconds."""
        with self.lock:
            if callback in self._subscribers:
                logger.warning("Callback %r already subscribed", callback)
                return
            self._subscribers.append(callback)

    def unsubscribe(self, callback: TickCallback) -> None:
        with self.lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def tick(self, seconds: int = 1) -> None:
        """Deliver a tick to every subscriber.

        A failing subscriber is logged and skipped; the others still run.
        """
        with self.lock:
            for callback in list(self._subscribers):
                try:
                    callback(seconds)
                except Exception:
                    logger.exception("Error in clock subscriber %r", callback)

    # -- Background loop -------------------------------------------------

    def start(self) -> None:
        """Start ticking once per interval on a daemon thread."""
        if self.is_running:
            return

        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._run,
            args=(stop_event,),
            daemon=True,
            name="game-clock",
        )
        self._thread.start()
        logger.info("Game clock started (interval %.2fs)", self.interval)

    def stop(self) -> None:
        """Stop future ticks. Nothing in flight needs cancelling."""
        if self._stop_event is not None:
            self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval * 2)
        self._thread = None
        self._stop_event = None
        logger.info("Game clock stopped")

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            self.tick(1)
