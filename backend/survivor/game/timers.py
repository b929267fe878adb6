from __future__ import annotations

import threading
import time
from typing import Callable, Hashable


def _start_thread(fn: Callable[[], None]) -> None:
    threading.Thread(target=fn, daemon=True).start()


class TaskScheduler:
    """Delayed callbacks keyed by an arbitrary hashable.

    Scheduling under a key that is already pending replaces the old task;
    ``cancel`` drops it. A task only runs if it is still the one registered
    under its key when the delay expires.

    ``start_task`` and ``sleep`` default to plain threads; the realtime server
    passes ``socketio.start_background_task`` and ``socketio.sleep`` so the
    timers cooperate with eventlet.
    """

    def __init__(
        self,
        start_task: Callable[[Callable[[], None]], object] | None = None,
        sleep: Callable[[float], object] | None = None,
    ):
        self._start_task = start_task or _start_thread
        self._sleep = sleep or time.sleep
        self._lock = threading.RLock()
        self._tasks: dict[Hashable, object] = {}

    def schedule(self, key: Hashable, delay: float, fn: Callable[[], None]) -> None:
        token = object()
        with self._lock:
            self._tasks[key] = token

        def _runner() -> None:
            self._sleep(delay)
            with self._lock:
                if self._tasks.get(key) is not token:
                    return
                del self._tasks[key]
            fn()

        self._start_task(_runner)

    def cancel(self, key: Hashable) -> bool:
        with self._lock:
            return self._tasks.pop(key, None) is not None
