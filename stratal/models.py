"""Records stored in the job database."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Sequence

from stratal.config import AutomationConfig

JOB_COLUMNS = (
    "id",
    "name",
    "schedule",
    "type",
    "config",
    "status",
    "retries",
    "max_retries",
    "created_at",
    "updated_at",
    "user_id",
)

JOB_RUN_COLUMNS = (
    "id",
    "job_id",
    "status",
    "logs",
    "started_at",
    "ended_at",
    "created_at",
    "updated_at",
)


class JobStatus(str, Enum):
    """State of a job or of one run of it."""

    PENDING = "pending"
    RUNNING = "running"
    FAILED = "failed"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: Any) -> JobStatus | None:
        """Read a status from a database value; ``None`` stays ``None``."""
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        if isinstance(value, (bytes, bytearray, memoryview)):
            value = bytes(value).decode()
        if not isinstance(value, str):
            raise TypeError(
                f"unsupported scan type for JobStatus: {type(value).__name__}"
            )
        return cls(value)


def _columns(row: Mapping[str, Any] | Sequence[Any], names: tuple[str, ...]) -> list[Any]:
    if isinstance(row, Mapping):
        return [row[name] for name in names]
    values = list(row)
    if len(values) != len(names):
        raise ValueError(f"expected {len(names)} columns, got {len(values)}")
    return values


def _uuid(value: Any) -> uuid.UUID | None:
    if value is None or isinstance(value, uuid.UUID):
        return value
    if isinstance(value, (bytes, bytearray)):
        return uuid.UUID(bytes=bytes(value)) if len(value) == 16 else uuid.UUID(value.decode())
    return uuid.UUID(str(value))


def _config(value: Any) -> AutomationConfig:
    if value is None:
        return AutomationConfig()
    if isinstance(value, AutomationConfig):
        return value
    if isinstance(value, (str, bytes, bytearray)):
        return AutomationConfig.from_json(value)
    return AutomationConfig.from_dict(value)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _str_or_none(value: Any) -> str | None:
    return str(value) if value is not None else None


@dataclass
class Job:
    """A scheduled automation."""

    id: uuid.UUID | None = None
    name: str = ""
    schedule: str | None = None
    job_type: str | None = None
    config: AutomationConfig = field(default_factory=AutomationConfig)
    status: JobStatus | None = None
    retries: int | None = None
    max_retries: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    user_id: int | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any] | Sequence[Any]) -> Job:
        (
            id_,
            name,
            schedule,
            job_type,
            config,
            status,
            retries,
            max_retries,
            created_at,
            updated_at,
            user_id,
        ) = _columns(row, JOB_COLUMNS)
        return cls(
            id=_uuid(id_),
            name=name,
            schedule=schedule,
            job_type=job_type,
            config=_config(config),
            status=JobStatus.parse(status),
            retries=retries,
            max_retries=max_retries,
            created_at=created_at,
            updated_at=updated_at,
            user_id=user_id,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": _str_or_none(self.id),
            "name": self.name,
            "schedule": self.schedule,
            "type": self.job_type,
            "config": self.config.to_dict(),
            "status": self.status.value if self.status is not None else None,
            "retries": self.retries,
            "max_retries": self.max_retries,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "user_id": self.user_id,
        }


@dataclass
class JobRun:
    """One execution of a job."""

    id: uuid.UUID | None = None
    job_id: uuid.UUID | None = None
    status: JobStatus | None = None
    logs: str | None = None
    started_at: datetime | None = None
    ended_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any] | Sequence[Any]) -> JobRun:
        (
            id_,
            job_id,
            status,
            logs,
            started_at,
            ended_at,
            created_at,
            updated_at,
        ) = _columns(row, JOB_RUN_COLUMNS)
        return cls(
            id=_uuid(id_),
            job_id=_uuid(job_id),
            status=JobStatus.parse(status),
            logs=logs,
            started_at=started_at,
            ended_at=ended_at,
            created_at=created_at,
            updated_at=updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": _str_or_none(self.id),
            "job_id": _str_or_none(self.job_id),
            "status": self.status.value if self.status is not None else None,
            "logs": self.logs,
            "started_at": _iso(self.started_at),
            "ended_at": _iso(self.ended_at),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass
class User:
    """An account that owns jobs."""

    id: int = 0
    username: str = ""
    email: str = ""
    password_hash: str = ""
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "password_hash": self.password_hash,
            "created_at": _iso(self.created_at),
        }