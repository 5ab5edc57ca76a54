"""Automation configuration documents stored with each job."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TypeError(f"{what} must be an object, not {type(data).__name__}")
    return data


def _get_str(data: Mapping[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"{what}.{key} must be a string, not {type(value).__name__}")
    return value


@dataclass
class ScriptConfig:
    """Inline script attached to a task."""

    language: str = ""
    code: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ScriptConfig:
        data = _require_mapping(data, "script")
        return cls(
            language=_get_str(data, "language", "script"),
            code=_get_str(data, "code", "script"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"language": self.language, "code": self.code}


@dataclass
class TaskConfig:
    """One step of an automation."""

    id: str = ""
    type: str = ""
    name: str = ""
    depends_on: list[str] = field(default_factory=list)
    parameters: dict[str, str] = field(default_factory=dict)
    script: ScriptConfig | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TaskConfig:
        data = _require_mapping(data, "task")

        depends_on = data.get("depends_on") or []
        if not isinstance(depends_on, list) or not all(
            isinstance(item, str) for item in depends_on
        ):
            raise TypeError("task.depends_on must be a list of strings")

        parameters = data.get("parameters") or {}
        parameters = _require_mapping(parameters, "task.parameters")
        if not all(
            isinstance(k, str) and isinstance(v, str) for k, v in parameters.items()
        ):
            raise TypeError("task.parameters must map strings to strings")

        script_data = data.get("script")
        script = None if script_data is None else ScriptConfig.from_dict(script_data)

        return cls(
            id=_get_str(data, "id", "task"),
            type=_get_str(data, "type", "task"),
            name=_get_str(data, "name", "task"),
            depends_on=list(depends_on),
            parameters=dict(parameters),
            script=script,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"id": self.id, "type": self.type, "name": self.name}
        if self.depends_on:
            result["depends_on"] = list(self.depends_on)
        if self.parameters:
            result["parameters"] = dict(self.parameters)
        if self.script is not None:
            result["script"] = self.script.to_dict()
        return result


@dataclass
class AutomationConfig:
    """A named set of tasks that a job runs."""

    name: str = ""
    description: str = ""
    tasks: list[TaskConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AutomationConfig:
        data = _require_mapping(data, "config")
        tasks = data.get("tasks") or []
        if not isinstance(tasks, list):
            raise TypeError("config.tasks must be a list")
        return cls(
            name=_get_str(data, "name", "config"),
            description=_get_str(data, "description", "config"),
            tasks=[TaskConfig.from_dict(task) for task in tasks],
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name}
        if self.description:
            result["description"] = self.description
        result["tasks"] = [task.to_dict() for task in self.tasks]
        return result

    @classmethod
    def from_json(cls, text: str | bytes) -> AutomationConfig:
        data = json.loads(text)
        if data is None:
            return cls()
        return cls.from_dict(data)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())