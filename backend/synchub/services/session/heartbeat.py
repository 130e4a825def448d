import logging
import threading
from typing import Callable, Optional


class Heartbeat:
    """Periodic liveness tick, cancellable.

    `runner` is anything exposing ``start_background_task(target, *args)``,
    normally the Flask-SocketIO instance so the loop matches its async mode.
    """

    def __init__(self, interval_sec: float, on_beat: Callable[[], None], runner,
                 logger: Optional[logging.Logger] = None):
        self.interval_sec = float(interval_sec or 0)
        self.on_beat = on_beat
        self.runner = runner
        self.logger = logger or logging.getLogger(__name__)
        self.beats = 0
        self._stop: Optional[threading.Event] = None
        self._task = None

    @property
    def running(self) -> bool:
        return self._stop is not None and not self._stop.is_set()

    def start(self) -> bool:
        if self.interval_sec <= 0:
            self.logger.info("[heartbeat-disabled] interval <= 0")
            return False
        if self.running:
            return False
        self._stop = threading.Event()
        self._task = self.runner.start_background_task(self._loop, self._stop)
        self.logger.info(f"[heartbeat-start] interval={self.interval_sec}s")
        return True

    def _loop(self, stop: threading.Event) -> None:
        while not stop.wait(self.interval_sec):
            try:
                self.on_beat()
                self.beats += 1
            except Exception:
                # A failed beat must not end the loop
                self.logger.exception("[heartbeat-error] beat failed")

    def stop(self, timeout: Optional[float] = 1.0) -> None:
        if self._stop is None or self._stop.is_set():
            return
        self._stop.set()
        join = getattr(self._task, 'join', None)
        if callable(join):
            join(timeout)
        self.logger.info(f"[heartbeat-stop] beats={self.beats}")
