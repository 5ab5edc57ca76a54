"""Typed access to the jobs and job_runs tables."""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, Protocol, TypeVar

from stratal.config import AutomationConfig
from stratal.models import Job, JobRun, JobStatus

T = TypeVar("T")

_JOB_FIELDS = (
    "id, name, schedule, type, config, status, retries, max_retries, "
    "created_at, updated_at, user_id"
)
_RUN_FIELDS = "id, job_id, status, logs, started_at, ended_at, created_at, updated_at"

CREATE_JOB = (
    "INSERT INTO jobs (name, schedule, type, config, status, retries, max_retries) "
    f"VALUES (%s, %s, %s, %s, %s, %s, %s) RETURNING {_JOB_FIELDS}"
)
DELETE_JOB = "DELETE FROM jobs WHERE id = %s"
GET_JOB = f"SELECT {_JOB_FIELDS} FROM jobs WHERE id = %s LIMIT 1"
LIST_JOBS = f"SELECT {_JOB_FIELDS} FROM jobs ORDER BY id DESC LIMIT %s OFFSET %s"
LIST_PENDING_JOBS = (
    f"SELECT {_JOB_FIELDS} FROM jobs WHERE status = 'pending' AND "
    "(schedule IS NOT NULL OR schedule != '') ORDER BY created_at DESC"
)
UPDATE_JOB_STATUS = (
    "UPDATE jobs SET status = %s, retries = %s, updated_at = CURRENT_TIMESTAMP "
    f"WHERE id = %s RETURNING {_JOB_FIELDS}"
)

CREATE_JOB_RUN = (
    "INSERT INTO job_runs (job_id, status, logs, started_at, ended_at) "
    f"VALUES (%s, %s, %s, %s, %s) RETURNING {_RUN_FIELDS}"
)
DELETE_JOB_RUN = "DELETE FROM job_runs WHERE id = %s"
GET_JOB_RUN = f"SELECT {_RUN_FIELDS} FROM job_runs WHERE id = %s LIMIT 1"
LIST_JOB_RUNS = f"SELECT {_RUN_FIELDS} FROM job_runs ORDER BY id LIMIT %s OFFSET %s"
UPDATE_JOB_RUN = (
    "UPDATE job_runs SET status = %s, logs = %s, ended_at = %s "
    f"WHERE id = %s RETURNING {_RUN_FIELDS}"
)


class Cursor(Protocol):
    def fetchone(self) -> Any: ...

    def fetchall(self) -> list[Any]: ...


class Connection(Protocol):
    """Anything with ``execute(sql, params)`` returning a cursor, such as a
    connection or transaction of a PostgreSQL driver using ``%s`` placeholders."""

    def execute(self, sql: str, params: tuple[Any, ...] = ...) -> Cursor: ...


class NoRowsError(LookupError):
    """A query that must return one row returned none."""

    def __init__(self, message: str = "no rows in result set") -> None:
        super().__init__(message)


def _status_value(status: JobStatus | str | None) -> str | None:
    parsed = JobStatus.parse(status)
    return parsed.value if parsed is not None else None


def _config_json(config: AutomationConfig | Mapping[str, Any]) -> str:
    if not isinstance(config, AutomationConfig):
        config = AutomationConfig.from_dict(config)
    return config.to_json()


class Queries:
    """Queries on jobs and job runs over one connection or transaction."""

    def __init__(self, db: Connection) -> None:
        self._db = db

    def with_tx(self, tx: Connection) -> Queries:
        return Queries(tx)

    def _one(self, sql: str, params: tuple[Any, ...], factory: Callable[[Any], T]) -> T:
        row = self._db.execute(sql, params).fetchone()
        if row is None:
            raise NoRowsError()
        return factory(row)

    def _many(self, sql: str, params: tuple[Any, ...], factory: Callable[[Any], T]) -> list[T]:
        return [factory(row) for row in self._db.execute(sql, params).fetchall()]

    def create_job(
        self,
        name: str,
        schedule: str | None,
        job_type: str | None,
        config: AutomationConfig | Mapping[str, Any],
        status: JobStatus | str | None,
        retries: int | None,
        max_retries: int | None,
    ) -> Job:
        params = (
            name,
            schedule,
            job_type,
            _config_json(config),
            _status_value(status),
            retries,
            max_retries,
        )
        return self._one(CREATE_JOB, params, Job.from_row)

    def delete_job(self, job_id: uuid.UUID) -> None:
        self._db.execute(DELETE_JOB, (job_id,))

    def get_job(self, job_id: uuid.UUID) -> Job:
        return self._one(GET_JOB, (job_id,), Job.from_row)

    def list_jobs(self, limit: int, offset: int) -> list[Job]:
        return self._many(LIST_JOBS, (limit, offset), Job.from_row)

    def list_pending_jobs(self) -> list[Job]:
        return self._many(LIST_PENDING_JOBS, (), Job.from_row)

    def update_job_status(
        self, job_id: uuid.UUID, status: JobStatus | str | None, retries: int | None
    ) -> Job:
        params = (_status_value(status), retries, job_id)
        return self._one(UPDATE_JOB_STATUS, params, Job.from_row)

    def create_job_run(
        self,
        job_id: uuid.UUID,
        status: JobStatus | str | None,
        logs: str | None,
        started_at: datetime | None,
        ended_at: datetime | None,
    ) -> JobRun:
        params = (job_id, _status_value(status), logs, started_at, ended_at)
        return self._one(CREATE_JOB_RUN, params, JobRun.from_row)

    def delete_job_run(self, run_id: uuid.UUID) -> None:
        self._db.execute(DELETE_JOB_RUN, (run_id,))

    def get_job_run(self, run_id: uuid.UUID) -> JobRun:
        return self._one(GET_JOB_RUN, (run_id,), JobRun.from_row)

    def list_job_runs(self, limit: int, offset: int) -> list[JobRun]:
        return self._many(LIST_JOB_RUNS, (limit, offset), JobRun.from_row)

    def update_job_run(
        self,
        run_id: uuid.UUID,
        status: JobStatus | str | None,
        logs: str | None,
        ended_at: datetime | None,
    ) -> JobRun:
        params = (_status_value(status), logs, ended_at, run_id)
        return self._one(UPDATE_JOB_RUN, params, JobRun.from_row)