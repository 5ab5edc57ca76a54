"""Conversion of raw stream entries into task payloads."""

from __future__ import annotations

import json
from typing import Any, Mapping


def task_mapper(values: Mapping[str, Any]) -> Any:
    """Decode the JSON held under ``data``; undecodable JSON yields ``None``."""
    if "data" not in values:
        raise KeyError("key 'data' not found in the map")
    data = values["data"]
    if not isinstance(data, str):
        raise TypeError("value of 'data' is not a string")
    try:
        return json.loads(data)
    except json.JSONDecodeError:
        return None