"""Dynamically growing work queue drained by a fixed pool of worker threads."""

import queue
import threading
from pathlib import Path
from typing import Callable, Iterable, Optional

_CLOSED = object()


class TaskGroup:
    """
    Counts outstanding work items.

    add() must be called before the new items are handed to any worker, and
    done() once per finished item. wait() returns once the count is back to
    zero.
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._outstanding = 0

    def add(self, n: int = 1) -> None:
        if n < 0:
            raise ValueError("cannot add a negative number of tasks")
        with self._cond:
            self._outstanding += n

    def done(self) -> None:
        with self._cond:
            if self._outstanding <= 0:
                raise ValueError("done() called more times than tasks were added")
            self._outstanding -= 1
            if self._outstanding == 0:
                self._cond.notify_all()

    def wait(self) -> None:
        with self._cond:
            while self._outstanding:
                self._cond.wait()


class WorkQueue:
    """
    A queue of paths processed concurrently by a fixed number of threads.

    The handler may enqueue more paths while it runs (a directory enqueues its
    children). The queue is exhausted exactly when every submitted item has
    completed. run() waits on the task group for that moment, then closes the
    queue and every worker exits.

    If a handler raises, the first exception is kept, the remaining items are
    drained without being handled, and run() raises it once all workers have
    stopped.
    """

    def __init__(
        self,
        handler: Callable[[Path], None],
        workers: int,
        on_progress: Optional[Callable[[int, int], None]] = None
    ):
        if workers < 1:
            raise ValueError("a work queue needs at least one worker")
        self._handler = handler
        self._workers = workers
        self._on_progress = on_progress
        self._items: queue.Queue = queue.Queue()
        self._group = TaskGroup()
        self._lock = threading.Lock()
        self._error: Optional[BaseException] = None
        self.submitted = 0
        self.completed = 0

    def enqueue(self, paths: Iterable[Path]) -> None:
        """Submit new items. Safe to call from inside the handler."""
        paths = list(paths)
        if not paths:
            return
        # Outstanding work is registered before any item can be picked up
        self._group.add(len(paths))
        with self._lock:
            self.submitted += len(paths)
            counts = (self.completed, self.submitted)
        for path in paths:
            self._items.put(path)
        self._report(*counts)

    def run(self, seed: Path) -> None:
        """Process seed and everything it leads to, blocking until drained."""
        threads = [
            threading.Thread(target=self._work, name=f"dedup-worker-{i}", daemon=True)
            for i in range(self._workers)
        ]
        for thread in threads:
            thread.start()
        self.enqueue([seed])
        self._group.wait()
        self._close()
        for thread in threads:
            thread.join()
        if self._error is not None:
            raise self._error

    def _work(self) -> None:
        while True:
            item = self._items.get()
            if item is _CLOSED:
                return
            try:
                if self._error is None:
                    self._handler(item)
            except Exception as e:
                with self._lock:
                    if self._error is None:
                        self._error = e
            finally:
                self._complete()

    def _complete(self) -> None:
        with self._lock:
            self.completed += 1
            counts = (self.completed, self.submitted)
        try:
            self._report(*counts)
        finally:
            self._group.done()

    def _close(self) -> None:
        for _ in range(self._workers):
            self._items.put(_CLOSED)

    def _report(self, completed: int, submitted: int) -> None:
        if self._on_progress is not None:
            self._on_progress(completed, submitted)
