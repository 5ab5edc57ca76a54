"""Job queues backed by Redis lists and streams."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

import redis

logger = logging.getLogger(__name__)

Mapper = Callable[[Mapping[str, Any]], Any]


def _text(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode()
    return value


class TaskQueue(ABC):
    """A queue of serialized jobs."""

    @abstractmethod
    def enqueue(self, job: bytes | str) -> None:
        """Append a job to the tail of the queue."""

    @abstractmethod
    def dequeue(self) -> str:
        """Block until a job is available and return it."""

    @abstractmethod
    def xread_generic(self, last_id: str, block: int, mapper: Mapper) -> list[dict[str, Any]]:
        """Read stream entries after ``last_id`` and map each one to a task."""

    @abstractmethod
    def xdelete(self, message_id: str) -> None:
        """Remove one entry from the stream."""


class RedisQueue(TaskQueue):
    """Queue stored under one Redis key, used as a list and as a stream."""

    def __init__(
        self,
        addr: str = "localhost:6379",
        password: str | None = None,
        db: int = 0,
        key: str = "jobs",
        client: Any = None,
    ) -> None:
        if client is None:
            host, _, port = addr.rpartition(":")
            client = redis.Redis(
                host=host or "localhost",
                port=int(port),
                password=password or None,
                db=db,
                decode_responses=True,
            )
        self.client = client
        self.key = key

    def enqueue(self, job: bytes | str) -> None:
        self.client.rpush(self.key, job)

    def dequeue(self) -> str:
        result = self.client.blpop([self.key], timeout=0)
        if not result or len(result) < 2:
            return ""
        return _text(result[1])

    def xread_generic(self, last_id: str, block: int, mapper: Mapper) -> list[dict[str, Any]]:
        reply = self.client.xread({self.key: last_id}, count=1, block=block)
        if isinstance(reply, Mapping):
            reply = list(reply.items())
        if not reply:
            return []
        _, messages = reply[0]
        tasks: list[dict[str, Any]] = []
        for message_id, values in messages or ():
            fields = {_text(k): _text(v) for k, v in values.items()}
            task = mapper(fields)
            if not isinstance(task, dict):
                raise TypeError(f"unexpected type {type(task).__name__}")
            task["id"] = _text(message_id)
            task["data"] = task
            tasks.append(task)
        return tasks

    def xdelete(self, message_id: str) -> None:
        self.client.xdel(self.key, message_id)

    def move_to_dead_letter(self, task: bytes | str) -> None:
        """Push a task onto the dead-letter list; failures are logged, not raised."""
        try:
            self.client.rpush(f"{self.key}:dlq", task)
        except redis.RedisError as exc:
            logger.error("Error moving task to dead letter queue: %s", exc)