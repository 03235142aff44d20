"""Helpers shared by posting adapters."""

from __future__ import annotations

import json
from typing import Any, Mapping


def load_payload(blob: bytes | str | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(blob, Mapping):
        return dict(blob)
    if isinstance(blob, bytes):
        blob = blob.decode("utf-8")
    try:
        data = json.loads(blob)
    except json.JSONDecodeError as exc:
        raise ValueError("Invalid posting payload") from exc
    if not isinstance(data, dict):
        raise ValueError("Posting payload must be a JSON object")
    return data


def first_present(payload: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the value of the first key present with a non-null value."""
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return default


def board_of(payload: Mapping[str, Any]) -> str | None:
    value = first_present(payload, "boardType", "board_type")
    return str(value).upper() if value is not None else None
