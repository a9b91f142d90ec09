"""
Fire-and-forget background writer for persistence calls.

- Non-blocking .submit(fn, *args)
- Failures are logged and counted, never retried, never raised to the caller
- .flush() waits for pending writes (tests, shutdown)
- Context manager support
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)

_Task = Tuple[Callable[..., Any], tuple, dict, str]


class BackgroundWriter:
    """Single worker thread draining a queue of persistence tasks.

    Usage:
        writer = BackgroundWriter(on_error=show_warning)
        writer.submit(gateway.save_stats, user_id, stats)
        writer.close()
    """

    def __init__(self, on_error: Optional[Callable[[str, Exception], None]] = None,
                 maxsize: int = 0) -> None:
        self.on_error = on_error
        self.failures = 0
        self.completed = 0
        self._q: "queue.Queue[Optional[_Task]]" = queue.Queue(maxsize=maxsize)
        self._alive = True
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._loop, daemon=True, name="Persistence-Writer")
        self._thread.start()

    def submit(self, fn: Callable[..., Any], *args: Any, label: str = "", **kwargs: Any) -> bool:
        """Queue a call. Returns False (and drops it) once the writer is closed or full."""
        if not self._alive:
            logger.warning("writer closed, dropping %s", label or getattr(fn, "__name__", "task"))
            return False
        try:
            self._q.put_nowait((fn, args, kwargs, label or getattr(fn, "__name__", "task")))
        except queue.Full:
            logger.warning("writer queue full, dropping %s", label)
            return False
        return True

    def _loop(self) -> None:
        while True:
            task = self._q.get()
            try:
                if task is None:
                    return
                fn, args, kwargs, label = task
                try:
                    fn(*args, **kwargs)
                except Exception as e:
                    with self._lock:
                        self.failures += 1
                    logger.warning("persistence write %s failed: %s", label, e)
                    self._report(label, e)
                else:
                    with self._lock:
                        self.completed += 1
            finally:
                self._q.task_done()

    def _report(self, label: str, error: Exception) -> None:
        if self.on_error is None:
            return
        try:
            self.on_error(label, error)
        except Exception:
            logger.exception("on_error callback raised")

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Block until every queued task has run. Returns False on timeout."""
        if timeout is None:
            self._q.join()
            return True
        deadline = time.monotonic() + timeout
        with self._q.all_tasks_done:
            while self._q.unfinished_tasks:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._q.all_tasks_done.wait(remaining)
        return True

    def close(self, timeout: Optional[float] = 5.0) -> None:
        if not self._alive:
            return
        self._alive = False
        self._q.put(None)
        self._thread.join(timeout)

    def __enter__(self) -> "BackgroundWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
