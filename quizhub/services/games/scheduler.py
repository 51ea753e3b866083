import threading
import time
from typing import Callable, Optional


class HostInactivityTimer:
    """Single-shot, cancelable deferred task that ends a session whose host went away.

    ``start_task`` and ``sleep`` are the Socket.IO server's background task
    primitives so the timer cooperates with whatever async mode is in use.
    Every ``arm`` takes a new token; a runner whose token is no longer current
    wakes up and exits without calling ``on_expire``.
    """

    def __init__(self, delay_sec: float, on_expire: Callable[[], None],
                 start_task: Callable, sleep: Callable[[float], None], logger=None):
        self.delay_sec = float(delay_sec)
        self._on_expire = on_expire
        self._start_task = start_task
        self._sleep = sleep
        self._logger = logger
        self._lock = threading.Lock()
        self._generation = 0
        self._token: Optional[int] = None
        self.deadline: Optional[float] = None

    @property
    def armed(self) -> bool:
        return self._token is not None

    def arm(self) -> None:
        with self._lock:
            self._generation += 1
            self._token = self._generation
            self.deadline = time.monotonic() + self.delay_sec
            token, deadline = self._token, self.deadline
        self._log(f"[timer-set] host-inactivity delay={self.delay_sec}s")
        self._start_task(self._runner, token, deadline)

    def cancel(self) -> None:
        with self._lock:
            was_armed = self._token is not None
            self._token = None
            self.deadline = None
        if was_armed:
            self._log("[timer-cancel] host-inactivity")

    def _runner(self, token: int, deadline: float) -> None:
        sleep_for = max(0.0, deadline - time.monotonic())
        if sleep_for:
            self._sleep(sleep_for)
        with self._lock:
            if self._token != token:
                return
            self._token = None
            self.deadline = None
        self._log("[timer-fire] host-inactivity")
        self._on_expire()

    def _log(self, message: str) -> None:
        if self._logger is not None:
            self._logger.info(message)
