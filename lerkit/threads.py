"""A fixed-size pool of worker threads that run queued callables."""

from __future__ import annotations

import queue
import threading
from concurrent.futures import Future
from typing import Any, Callable


class ThreadPool:
    """Run callables on a fixed set of worker threads, in FIFO order.

    Each queued callable yields a :class:`concurrent.futures.Future` that
    carries its return value or the exception it raised.
    """

    def __init__(self, num_threads: int = 4) -> None:
        if num_threads < 1:
            raise ValueError("a thread pool needs at least one thread")
        self.num_threads = num_threads
        self._queue: queue.SimpleQueue[tuple[Callable[..., Any], tuple[Any, ...], Future] | None]
        self._queue = queue.SimpleQueue()
        self._lock = threading.Lock()
        self._closed = False
        self._threads = [
            threading.Thread(target=self._worker, name=f"lerkit-pool-{i}", daemon=True)
            for i in range(num_threads)
        ]
        for thread in self._threads:
            thread.start()

    @property
    def closed(self) -> bool:
        return self._closed

    def enqueue(self, fn: Callable[..., Any], *args: Any) -> Future:
        """Queue ``fn(*args)`` and return the future of its result."""
        future: Future = Future()
        with self._lock:
            if self._closed:
                raise RuntimeError("thread pool is closed")
            self._queue.put((fn, args, future))
        return future

    def _worker(self) -> None:
        while True:
            item = self._queue.get()
            if item is None:
                return
            fn, args, future = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                result = fn(*args)
            except Exception as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)

    def close(self) -> None:
        """Run what is already queued, then stop the workers."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            for _ in self._threads:
                self._queue.put(None)
        current = threading.current_thread()
        for thread in self._threads:
            if thread is not current:
                thread.join()

    def __enter__(self) -> ThreadPool:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()