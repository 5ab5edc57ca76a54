# stratal

A small job automation library. A job carries an automation config (a
named list of tasks with dependencies, parameters and optional scripts).
Jobs are stored through a query layer. A scheduler picks up pending jobs
and pushes them onto a Redis list, and a worker takes them off again. A
Flask application lets clients create and list jobs.

## Modules

- `stratal.config`: `AutomationConfig`, `TaskConfig` and `ScriptConfig`
  dataclasses. Each has `from_dict` / `to_dict`, and
  `AutomationConfig` also has `from_json` / `to_json`. Empty optional
  fields (`description`, `depends_on`, `parameters`, `script`) are left
  out of `to_dict`. Values of the wrong type raise `TypeError`.
- `stratal.models`: `JobStatus` (`pending`, `running`, `failed`,
  `completed`) and the `Job`, `JobRun` and `User` dataclasses.
  `Job.from_row` and `JobRun.from_row` accept a mapping or a sequence of
  columns. `to_dict` gives JSON-ready values: UUIDs become strings and
  datetimes become ISO 8601 text.
- `stratal.queries`: `Queries`, the data access layer for the `jobs` and
  `job_runs` tables. It provides `create_job`, `get_job`, `list_jobs`,
  `list_pending_jobs`, `update_job_status`, `delete_job`,
  `create_job_run`, `get_job_run`, `list_job_runs`, `update_job_run`,
  `delete_job_run` and `with_tx`. A query that must return a row and
  returns none raises `NoRowsError`.
- `stratal.queue`: the abstract `TaskQueue` and `RedisQueue`.
  `RedisQueue` uses:
  - a Redis list for `enqueue` / `dequeue` (`dequeue` blocks);
  - a Redis stream under the same key for `xread_generic` / `xdelete`;
  - a `<key>:dlq` list for `move_to_dead_letter`, which logs Redis errors
    instead of raising them.

  A ready-made Redis client can be passed as `client`.
- `stratal.mappers`: `task_mapper`, which decodes the JSON string held
  under the `data` field of a stream entry. A missing field raises
  `KeyError` and a non-string raises `TypeError`. JSON that does not
  decode yields `None`.
- `stratal.scheduler`:
  - `enqueue_pending_jobs` does a single pass: it enqueues every pending
    job as JSON and returns the count.
  - `Scheduler` repeats that pass in a daemon thread every `interval`
    seconds (10 by default). The first pass happens after the first
    interval.
  - `start_scheduler` creates and starts a `Scheduler`.
- `stratal.worker`:
  - `Worker` runs a daemon thread that dequeues tasks and hands each one
    to `process_job`, then waits `delay` seconds (1 by default).
  - `run_once` does a single step.
  - `start_worker` creates and starts a `Worker`.
- `stratal.processor`: `process_job`, which prints the task.
- `stratal.send_email`:
  - `send_email_task` sends an HTML message over SMTP on an implicit-TLS
    connection, optionally multipart with a plain-text part. It raises
    `EmailError` on any failure.
  - `build_mime_email` builds the message text.
- `stratal.api`: `create_app(store)` returns a Flask app with
  `POST /jobs` and `GET /jobs?limit=&offset=`. `Server(store).start(address)`
  runs it, defaulting to `":8040"`.

## Configs

```python
from stratal.config import AutomationConfig

config = AutomationConfig.from_json("""
{
  "name": "nightly",
  "tasks": [
    {"id": "fetch", "type": "http", "name": "Fetch report"},
    {"id": "mail", "type": "email", "name": "Send report",
     "depends_on": ["fetch"]}
  ]
}
""")
print(config.tasks[1].depends_on)   # ['fetch']
print(config.to_json())
```

## Putting it together

```python
from stratal.api import Server
from stratal.queries import Queries
from stratal.queue import RedisQueue
from stratal.scheduler import start_scheduler
from stratal.worker import start_worker

store = Queries(connection)           # a database connection you provide
queue = RedisQueue("localhost:6379", "", 0, "jobs")

start_scheduler(queue, store)
start_worker(queue)

Server(store).start(":8040")
```

`Queries` works with any object whose `execute(sql, params)` returns a
cursor with `fetchone` and `fetchall`. The SQL uses `%s` placeholders,
as PostgreSQL drivers do.

## The HTTP API

Creating a job:

```
POST /jobs
{
  "name": "nightly",
  "schedule": "@daily",
  "type": "automation",
  "config": {"name": "nightly", "tasks": []},
  "max_retries": 3
}
```

Validation rules:

- `name`, `schedule`, `type` and `config` are required.
- `max_retries` must be a positive integer.
- `retries`, if given, must not be negative.
- `status`, if given, must be one of `pending`, `running`, `success` or
  `failed`. It is checked but not used: new jobs are always stored with
  status `pending`.

Responses:

- A malformed or invalid body gets status 400 and `{"error": "..."}`.
- A storage failure gets status 500 with the same shape.
- A `config` that cannot be read as an automation config is logged and
  answered with an empty 200 response, and no job is stored.
- A created job is returned as JSON.

`GET /jobs` returns a JSON list of jobs, newest id first. `limit` and
`offset` default to 0.

## Sending e-mail

```python
from stratal.send_email import send_email_task, EmailError

try:
    send_email_task({
        "smtp_host": "smtp.example.com",
        "smtp_port": "465",
        "smtp_user": "reports@example.com",
        "smtp_password": "password",
        "from": "reports@example.com",
        "to": "alice@example.com,bob@example.com",
        "subject": "Nightly report",
        "body_html": "<p>All good.</p>",
        "body_text": "All good.",
    })
except EmailError as exc:
    print(exc)
```

Missing parameters are reported together, in the order `smtp_host,
smtp_port, smtp_user, smtp_password, from, to, subject, body_html`. The
server certificate is not verified.

## What it does not do

- There is no command-line program. The pieces are started from your own
  code, as shown above.
- The package does not create the `jobs` and `job_runs` tables or open a
  database connection. It ships no database driver.
- Running a job means only that `process_job` prints it. The tasks of a
  config are not executed, and `send_email_task` is not wired into the
  worker.
- The API has no routes for fetching, updating, deleting or running a
  single job.