import json
import uuid
from datetime import datetime, timezone

import pytest

from stratal.config import AutomationConfig, TaskConfig
from stratal.models import JOB_COLUMNS, JOB_RUN_COLUMNS, Job, JobRun, JobStatus, User

JOB_ID = uuid.uuid4()
CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)
CONFIG = AutomationConfig(name="c", tasks=[TaskConfig(id="t", type="shell", name="n")])


def _job_row():
    return (
        str(JOB_ID),
        "nightly",
        "@every 10s",
        "shell",
        CONFIG.to_json(),
        "pending",
        0,
        3,
        CREATED,
        CREATED,
        None,
    )


def test_parse_status_from_bytes():
    assert JobStatus.parse(b"running") is JobStatus.RUNNING


def test_parse_status_from_str():
    assert JobStatus.parse("completed") is JobStatus.COMPLETED


def test_parse_status_none():
    assert JobStatus.parse(None) is None


def test_parse_status_bad_type():
    with pytest.raises(TypeError, match="unsupported scan type for JobStatus"):
        JobStatus.parse(5)


def test_job_from_tuple_row():
    job = Job.from_row(_job_row())
    assert job.id == JOB_ID
    assert job.status is JobStatus.PENDING
    assert job.config == CONFIG
    assert job.max_retries == 3


def test_job_from_mapping_matches_tuple():
    mapping = dict(zip(JOB_COLUMNS, _job_row()))
    assert Job.from_row(mapping) == Job.from_row(_job_row())


def test_job_config_from_dict_column():
    row = list(_job_row())
    row[4] = CONFIG.to_dict()
    assert Job.from_row(row).config == CONFIG


def test_job_wrong_column_count():
    with pytest.raises(ValueError):
        Job.from_row(_job_row()[:5])


def test_job_to_dict_is_json_ready():
    data = Job.from_row(_job_row()).to_dict()
    assert data["id"] == str(JOB_ID)
    assert data["status"] == "pending"
    assert data["type"] == "shell"
    assert data["created_at"] == CREATED.isoformat()
    assert json.loads(json.dumps(data))["config"] == CONFIG.to_dict()


def test_job_run_round_trip_via_mapping():
    run_id = uuid.uuid4()
    row = (run_id, JOB_ID, None, "ok", CREATED, None, CREATED, CREATED)
    run = JobRun.from_row(dict(zip(JOB_RUN_COLUMNS, row)))
    assert run.id == run_id
    assert run.job_id == JOB_ID
    assert run.status is None
    assert run.to_dict()["ended_at"] is None
    assert run.to_dict()["job_id"] == str(JOB_ID)


def test_user_to_dict():
    user = User(id=1, username="ann", email="ann@example.com", password_hash="placeholder")
    data = user.to_dict()
    assert data["email"] == "ann@example.com"
    assert data["created_at"] is None