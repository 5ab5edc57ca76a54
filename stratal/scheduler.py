"""Periodic enqueueing of pending jobs."""

from __future__ import annotations

import json
import logging
import threading
from typing import Any

from stratal.queue import TaskQueue

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 10.0


def enqueue_pending_jobs(queue: TaskQueue, store: Any) -> int:
    """Push every pending job onto the queue as JSON; return how many were pushed."""
    try:
        jobs = store.list_pending_jobs()
    except Exception:
        logger.exception("Error listing pending jobs")
        return 0
    for job in jobs:
        queue.enqueue(json.dumps(job.to_dict()).encode())
    return len(jobs)


class Scheduler:
    """Runs enqueue_pending_jobs every ``interval`` seconds in a background thread."""

    def __init__(self, queue: TaskQueue, store: Any, interval: float = DEFAULT_INTERVAL) -> None:
        self._queue = queue
        self._store = store
        self._interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            enqueue_pending_jobs(self._queue, self._store)

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("scheduler already started")
        self._thread = threading.Thread(target=self._run, name="scheduler", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()


def start_scheduler(queue: TaskQueue, store: Any, interval: float = DEFAULT_INTERVAL) -> Scheduler:
    """Create and start a scheduler."""
    scheduler = Scheduler(queue, store, interval)
    scheduler.start()
    return scheduler