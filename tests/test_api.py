import uuid
from unittest import mock

import pytest

from stratal.api import Server, create_app, error_response
from stratal.models import Job, JobStatus


class FakeStore:
    def __init__(self, fail=False):
        self.fail = fail
        self.created = []
        self.list_calls = []

    def create_job(self, name, schedule, job_type, config, status, retries, max_retries):
        if self.fail:
            raise RuntimeError("insert failed")
        self.created.append((name, schedule, job_type, config, status, retries, max_retries))
        return Job(
            id=uuid.UUID(int=7),
            name=name,
            schedule=schedule,
            job_type=job_type,
            config=config,
            status=status,
            retries=retries,
            max_retries=max_retries,
        )

    def list_jobs(self, limit, offset):
        self.list_calls.append((limit, offset))
        return [Job(id=uuid.UUID(int=1), name="a"), Job(id=uuid.UUID(int=2), name="b")]


def valid_body(**overrides):
    body = {
        "name": "nightly",
        "schedule": "@every 1h",
        "type": "email",
        "config": {"name": "cfg", "tasks": [{"id": "t1", "type": "email", "name": "send"}]},
        "status": "running",
        "retries": 1,
        "max_retries": 3,
    }
    body.update(overrides)
    return body


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def client(store):
    return create_app(store).test_client()


def test_error_response_wraps_message():
    assert error_response(ValueError("boom")) == {"error": "boom"}


def test_create_job_forces_pending_status(client, store):
    response = client.post("/jobs", json=valid_body())
    assert response.status_code == 200
    data = response.get_json()
    assert data["name"] == "nightly"
    assert data["status"] == "pending"
    assert data["config"]["tasks"][0]["id"] == "t1"
    name, schedule, job_type, config, status, retries, max_retries = store.created[0]
    assert (name, schedule, job_type) == ("nightly", "@every 1h", "email")
    assert status is JobStatus.PENDING
    assert (retries, max_retries) == (1, 3)
    assert config.name == "cfg"


@pytest.mark.parametrize(
    "overrides, field, tag",
    [
        ({"name": ""}, "Name", "required"),
        ({"max_retries": 0}, "MaxRetries", "required"),
        ({"max_retries": -1}, "MaxRetries", "gte"),
        ({"retries": -2}, "Retries", "gte"),
        ({"status": "unknown"}, "Status", "oneof"),
    ],
)
def test_create_job_validation(client, store, overrides, field, tag):
    response = client.post("/jobs", json=valid_body(**overrides))
    assert response.status_code == 400
    message = response.get_json()["error"]
    assert f"'{field}'" in message
    assert f"'{tag}'" in message
    assert store.created == []


def test_create_job_requires_config(client):
    body = valid_body()
    del body["config"]
    response = client.post("/jobs", json=body)
    assert response.status_code == 400
    assert "'Config'" in response.get_json()["error"]


def test_create_job_rejects_bad_json(client):
    response = client.post("/jobs", data="{", content_type="application/json")
    assert response.status_code == 400
    assert "error" in response.get_json()


def test_create_job_rejects_wrong_type(client):
    response = client.post("/jobs", json=valid_body(retries="two"))
    assert response.status_code == 400
    assert "retries" in response.get_json()["error"]


def test_create_job_bad_config_returns_empty(client, store):
    response = client.post("/jobs", json=valid_body(config="not an object"))
    assert response.status_code == 200
    assert response.data == b""
    assert store.created == []


def test_create_job_store_failure():
    client = create_app(FakeStore(fail=True)).test_client()
    response = client.post("/jobs", json=valid_body())
    assert response.status_code == 500
    assert response.get_json() == {"error": "insert failed"}


def test_list_jobs_passes_paging(client, store):
    response = client.get("/jobs?limit=5&offset=10")
    assert response.status_code == 200
    assert [job["name"] for job in response.get_json()] == ["a", "b"]
    assert store.list_calls == [(5, 10)]


def test_list_jobs_defaults_to_zero(client, store):
    response = client.get("/jobs")
    assert response.status_code == 200
    assert [job["name"] for job in response.get_json()] == ["a", "b"]
    assert store.list_calls == [(0, 0)]


def test_list_jobs_rejects_bad_limit(client, store):
    response = client.get("/jobs?limit=abc")
    assert response.status_code == 400
    assert "limit" in response.get_json()["error"]
    assert store.list_calls == []


def test_list_jobs_rejects_out_of_range(client):
    response = client.get("/jobs?offset=99999999999")
    assert response.status_code == 400


def test_get_job_route_not_registered(client):
    response = client.get(f"/jobs/{uuid.UUID(int=7)}")
    assert response.status_code == 404


def test_server_start_parses_address():
    server = Server(FakeStore())
    with mock.patch.object(server.app, "run") as run:
        server.start(":8040")
    run.assert_called_once_with(host="0.0.0.0", port=8040)


def test_server_start_with_host():
    server = Server(FakeStore())
    with mock.patch.object(server.app, "run") as run:
        server.start("127.0.0.1:9000")
    run.assert_called_once_with(host="127.0.0.1", port=9000)