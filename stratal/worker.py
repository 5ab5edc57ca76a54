"""Background worker that takes jobs off the queue and processes them."""

from __future__ import annotations

import logging
import threading

from stratal.processor import process_job
from stratal.queue import TaskQueue

logger = logging.getLogger(__name__)


class Worker:
    """Dequeues and processes jobs in a background thread."""

    def __init__(self, queue: TaskQueue, delay: float = 1.0) -> None:
        self._queue = queue
        self._delay = delay
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def run_once(self) -> str | None:
        """Process one job; return it, or None when dequeueing failed."""
        try:
            task = self._queue.dequeue()
        except Exception as exc:
            logger.error("Error dequeuing task: %s", exc)
            return None
        process_job(task)
        logger.info("Processed task: %s", task)
        return task

    def _run(self) -> None:
        while not self._stop.is_set():
            if self.run_once() is not None:
                self._stop.wait(self._delay)

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("worker already started")
        logger.info("Starting worker")
        self._thread = threading.Thread(target=self._run, name="worker", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Ask the loop to end and wait briefly; a blocked dequeue is left to the daemon thread."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self._delay + 1.0)


def start_worker(queue: TaskQueue, delay: float = 1.0) -> Worker:
    """Create and start a worker."""
    worker = Worker(queue, delay)
    worker.start()
    return worker