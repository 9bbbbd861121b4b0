"""
DesignOS: Delayed actions

TimerScheduler runs a callback once after a delay on a daemon timer
thread. The returned handle can be cancelled until the callback starts.
"""

import threading
from typing import Callable


class TimerHandle:

    def __init__(self, timer: threading.Timer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()

    @property
    def active(self) -> bool:
        return self._timer.is_alive()


class TimerScheduler:

    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return TimerHandle(timer)
