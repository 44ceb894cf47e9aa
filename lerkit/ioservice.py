"""Batched file reads into registered memory buffers."""

from __future__ import annotations

import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from lerkit.files import ReadOnlyFile
from lerkit.threads import ThreadPool


class IoError(Exception):
    """Raised when a read request of a batch cannot be carried out."""


@dataclass
class FileLoadRequest:
    """Read ``file_length`` bytes at ``file_offset`` into a registered buffer."""

    file: ReadOnlyFile
    file_length: int = 0
    file_offset: int = 0
    buff_offset: int = 0
    buff_index: int = 0


class IoService:
    """Carry out batches of file reads on a background worker.

    Reads land in buffers registered with :meth:`register_buffers`. When a
    batch is done, its future is completed from the given thread pool with
    the number of bytes read for each request.
    """

    def __init__(self, pool: ThreadPool) -> None:
        self._pool = pool
        self._buffers: list[memoryview] = []
        self.fixed = False
        self._tasks: queue.SimpleQueue[tuple[list[FileLoadRequest], Future] | None]
        self._tasks = queue.SimpleQueue()
        self._lock = threading.Lock()
        self._closed = False
        self._worker_thread = threading.Thread(target=self._worker, name="lerkit-io", daemon=True)
        self._worker_thread.start()

    def register_buffers(self, buffers: Iterable[Any], fixed: bool = False) -> None:
        """Append writable buffers; ``fixed`` records that they are pinned."""
        views = []
        for buffer in buffers:
            view = memoryview(buffer)
            if view.readonly:
                raise ValueError("registered buffers must be writable")
            views.append(view.cast("B"))
        self.fixed = fixed
        self._buffers.extend(views)

    def memory(self, index: int) -> memoryview:
        """The registered buffer at ``index``."""
        return self._buffer_at(index)

    def _buffer_at(self, index: int) -> memoryview:
        if not 0 <= index < len(self._buffers):
            raise IndexError(f"no registered buffer at index {index}")
        return self._buffers[index]

    def submit(self, requests: FileLoadRequest | Iterable[FileLoadRequest]) -> Future:
        """Queue one request or a batch; the future yields bytes read per request."""
        if isinstance(requests, FileLoadRequest):
            batch = [requests]
        else:
            batch = list(requests)
        future: Future = Future()
        with self._lock:
            if self._closed:
                raise RuntimeError("io service is closed")
            self._tasks.put((batch, future))
        return future

    def _process(self, batch: list[FileLoadRequest]) -> list[int]:
        counts = []
        for request in batch:
            try:
                buffer = self._buffer_at(request.buff_index)
            except IndexError as exc:
                raise IoError(f"[IoRing] {exc}") from exc
            if request.buff_offset < 0:
                raise IoError("[IoRing] buffer offset must not be negative")
            try:
                data = request.file.read_at(request.file_offset, request.file_length)
            except (OSError, ValueError) as exc:
                raise IoError(f"[IoRing] Read request failed: {exc}") from exc
            end = request.buff_offset + len(data)
            if end > len(buffer):
                raise IoError(
                    f"[IoRing] read of {len(data)} bytes at {request.buff_offset} "
                    f"overflows buffer {request.buff_index} of {len(buffer)} bytes"
                )
            buffer[request.buff_offset:end] = data
            counts.append(len(data))
        return counts

    def _resume(self, setter: Callable[[Any], None], value: Any, future: Future) -> None:
        if future.cancelled():
            return
        try:
            self._pool.enqueue(setter, value)
        except RuntimeError:
            setter(value)

    def _worker(self) -> None:
        while True:
            item = self._tasks.get()
            if item is None:
                return
            batch, future = item
            try:
                counts = self._process(batch)
            except IoError as exc:
                self._resume(future.set_exception, exc, future)
            else:
                self._resume(future.set_result, counts, future)

    def close(self) -> None:
        """Finish queued batches and stop the worker; the pool stays open."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._tasks.put(None)
        if self._worker_thread is not threading.current_thread():
            self._worker_thread.join()

    def __enter__(self) -> IoService:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()