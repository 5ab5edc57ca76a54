"""HTTP API for creating and listing jobs."""

from __future__ import annotations

import json
import logging
from typing import Any

from flask import Flask, Response, jsonify, request

from stratal.config import AutomationConfig
from stratal.models import JobStatus

logger = logging.getLogger(__name__)

_ALLOWED_STATUSES = ("pending", "running", "success", "failed")
_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1


class _BindError(ValueError):
    pass


def error_response(err: BaseException | str) -> dict[str, str]:
    return {"error": str(err)}


def _failed(field: str, tag: str) -> str:
    return (
        f"Key: 'CreateJobRequest.{field}' Error:Field validation for "
        f"'{field}' failed on the '{tag}' tag"
    )


def _string(body: dict[str, Any], key: str) -> str:
    value = body.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _BindError(f"json: field {key!r} must be a string")
    return value


def _integer(body: dict[str, Any], key: str) -> int:
    value = body.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise _BindError(f"json: field {key!r} must be an integer")
    return value


def _bind_create(body: Any) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise _BindError("json: request body must be an object")
    errors: list[str] = []
    values: dict[str, Any] = {}
    for key, field in (("name", "Name"), ("schedule", "Schedule"), ("type", "Type")):
        values[key] = _string(body, key)
        if not values[key]:
            errors.append(_failed(field, "required"))
    if "config" not in body:
        errors.append(_failed("Config", "required"))
    status = _string(body, "status")
    if status and status not in _ALLOWED_STATUSES:
        errors.append(_failed("Status", "oneof"))
    values["retries"] = _integer(body, "retries")
    if values["retries"] < 0:
        errors.append(_failed("Retries", "gte"))
    values["max_retries"] = _integer(body, "max_retries")
    if values["max_retries"] == 0:
        errors.append(_failed("MaxRetries", "required"))
    elif values["max_retries"] < 0:
        errors.append(_failed("MaxRetries", "gte"))
    if errors:
        raise _BindError("\n".join(errors))
    values["config"] = body["config"]
    return values


def _query_int(name: str) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return 0
    try:
        value = int(raw)
    except ValueError:
        raise _BindError(f"invalid value for {name}: {raw!r}") from None
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise _BindError(f"value out of range for {name}: {raw!r}")
    return value


def create_app(store: Any) -> Flask:
    """Build the Flask application serving ``/jobs`` over ``store``."""
    app = Flask(__name__)

    @app.post("/jobs")
    def create_job() -> Any:
        try:
            values = _bind_create(json.loads(request.get_data() or b"null"))
        except (json.JSONDecodeError, UnicodeDecodeError, _BindError) as exc:
            return jsonify(error_response(exc)), 400

        raw_config = values["config"]
        try:
            config = (
                AutomationConfig()
                if raw_config is None
                else AutomationConfig.from_dict(raw_config)
            )
        except (TypeError, ValueError) as exc:
            logger.error("failed to decode config: %s", exc)
            return Response(status=200)

        try:
            job = store.create_job(
                values["name"],
                values["schedule"],
                values["type"],
                config,
                JobStatus.PENDING,
                values["retries"],
                values["max_retries"],
            )
        except Exception as exc:
            return jsonify(error_response(exc)), 500
        return jsonify(job.to_dict()), 200

    @app.get("/jobs")
    def list_jobs() -> Any:
        try:
            limit = _query_int("limit")
            offset = _query_int("offset")
        except _BindError as exc:
            return jsonify(error_response(exc)), 400
        logger.info("ListJobsParams: limit=%d offset=%d", limit, offset)
        try:
            jobs = store.list_jobs(limit, offset)
        except Exception as exc:
            return jsonify(error_response(exc)), 500
        return jsonify([job.to_dict() for job in jobs]), 200

    return app


class Server:
    """The job API bound to a store."""

    def __init__(self, store: Any) -> None:
        self.store = store
        self.app = create_app(store)

    def start(self, address: str = ":8040") -> None:
        """Serve on ``host:port``; an empty host listens on all interfaces."""
        host, _, port = address.rpartition(":")
        self.app.run(host=host or "0.0.0.0", port=int(port))