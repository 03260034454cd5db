"""Planificador de ticks: síncrono en pruebas, con temporizador en producción.

Tick scheduler: synchronous in tests, timer driven in production.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from votewatch.config import TICK_INTERVALS
from votewatch.logging import get_logger

logger = get_logger(__name__)


class TickScheduler:
    """Ejecuta ``callback`` una vez por tick sin solapamiento.

    ``stop()`` es inmediato: un tick en curso termina y no se inicia otro.

    English:
        Runs ``callback`` once per tick with no overlap. ``stop()`` is
        immediate: an in-flight tick completes and no further tick starts.
    """

    def __init__(self, callback: Callable[[], object], interval_ms: int = 2000) -> None:
        self._callback = callback
        self._interval_ms = self._validate_interval(interval_ms)
        self._tick_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.ticks_run = 0
        self.ticks_failed = 0

    @staticmethod
    def _validate_interval(interval_ms: int) -> int:
        if interval_ms not in TICK_INTERVALS:
            raise ValueError(f"interval_ms must be one of {TICK_INTERVALS}, got {interval_ms}")
        return interval_ms

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @interval_ms.setter
    def interval_ms(self, value: int) -> None:
        self._interval_ms = self._validate_interval(value)
        logger.info("tick_interval_changed", interval_ms=value)

    @property
    def ticks_attempted(self) -> int:
        """Ticks del temporizador, exitosos o fallidos. / Timer ticks, successful or failed."""
        return self.ticks_run + self.ticks_failed

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    def tick(self) -> object:
        """Un tick síncrono; los ticks concurrentes se serializan.

        English: One synchronous tick; concurrent callers are serialised.
        """
        with self._tick_lock:
            result = self._callback()
            self.ticks_run += 1
            return result

    def _loop(self) -> None:
        while not self._stop_event.wait(self._interval_ms / 1000):
            try:
                self.tick()
            except Exception as exc:  # noqa: BLE001
                self.ticks_failed += 1
                logger.error("tick_failed", error=str(exc), exc_info=True)
        logger.info("scheduler_stopped", ticks_run=self.ticks_run, ticks_failed=self.ticks_failed)

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="votewatch-ticker", daemon=True)
        self._thread.start()
        logger.info("scheduler_started", interval_ms=self._interval_ms)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Detiene el temporizador; espera el tick en curso si lo hay.

        English:
            Stop the timer, waiting for an in-flight tick when called from
            another thread.
        """
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None
