"""Pull a generation id, a result URL and a status out of Gamma responses.

The Gamma API has answered with several shapes over time. Rather than
branching on an API version, every known field is listed in a rule table
and the tables are walked in order; the first non-empty string wins. All
functions here accept any value and return ``None`` instead of raising.
"""

from collections.abc import Callable
from enum import Enum
from typing import Any

from gamma_mcp.constants import COMPLETED_STATUSES, FAILED_STATUSES

JOB_ID_FIELDS = ("generationId", "generation_id", "id")

DIRECT_URL_FIELDS = (
    "gammaUrl",
    "gamma_url",
    "url",
    "exportUrl",
    "export_url",
    "outputUrl",
    "output_url",
)

STATUS_FIELDS = ("status", "state")


class GenerationState(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    IN_PROGRESS = "in_progress"


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _first_item(payload: dict[str, Any], key: str) -> Any:
    items = payload.get(key)
    if isinstance(items, list) and items:
        return items[0]
    return None


def entry_url(entry: Any) -> str | None:
    """URL of an array entry that is either a bare string or an object with ``url``."""
    if isinstance(entry, dict):
        return _text(entry.get("url"))
    return _text(entry)


def _object_url(entry: Any) -> str | None:
    if isinstance(entry, dict):
        return _text(entry.get("url"))
    return None


ARRAY_URL_RULES: tuple[tuple[str, Callable[[Any], str | None]], ...] = (
    ("outputs", _object_url),
    ("exports", entry_url),
    ("artifacts", _object_url),
)


def extract_job_id(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    for field in JOB_ID_FIELDS:
        value = payload.get(field)
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        found = _text(value)
        if found:
            return found
    return None


def extract_result_url(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    for field in DIRECT_URL_FIELDS:
        found = _text(payload.get(field))
        if found:
            return found
    for key, extractor in ARRAY_URL_RULES:
        found = extractor(_first_item(payload, key))
        if found:
            return found
    return None


def status_of(payload: Any) -> str:
    if not isinstance(payload, dict):
        return ""
    for field in STATUS_FIELDS:
        value = payload.get(field)
        if value:
            return str(value).strip().lower()
    return ""


def classify_status(status: Any) -> GenerationState:
    normalized = str(status or "").strip().lower()
    if normalized in COMPLETED_STATUSES:
        return GenerationState.COMPLETED
    if normalized in FAILED_STATUSES:
        return GenerationState.FAILED
    return GenerationState.IN_PROGRESS
