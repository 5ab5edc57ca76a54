"""Handling of jobs taken from the queue."""

from __future__ import annotations

from typing import Any


def process_job(task: Any) -> None:
    """Process one dequeued task."""
    print("Processing task:", task)