from __future__ import annotations

import json
import re

from pydantic import ValidationError

from .errors import BackendError
from .schemas import NarrativeResult

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


def extract_json_object(raw: str) -> dict | None:
    cleaned = _FENCE_RE.sub("", raw.strip())
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    try:
        parsed = json.loads(cleaned[start : end + 1])
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def parse_narrative(backend: str, raw: str) -> NarrativeResult:
    payload = extract_json_object(raw)
    if payload is None:
        raise BackendError(backend, "could not find a JSON object in response")
    try:
        return NarrativeResult.model_validate(payload)
    except ValidationError as exc:
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors()})
        raise BackendError(backend, f"invalid narrative fields: {', '.join(fields)}") from exc
