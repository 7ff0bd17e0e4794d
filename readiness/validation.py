"""
Acceptance checks for the language model's reply.

The model is asked for a single JSON object but frequently wraps it in prose or
markdown fences, so the object is located by its outermost braces before being
parsed and checked for the fields the report needs.
"""

import json
import logging
import re
from typing import Any, Mapping, Optional, Sequence, Tuple

from .errors import MissingField, NoJsonFound

logger = logging.getLogger(__name__)

_JSON_SPAN = re.compile(r"\{[\s\S]*\}")

# (canonical key, camelCase fallback) in the order they are checked
REQUIRED_FIELDS: Sequence[Tuple[str, str]] = (
    ("Student Name", "studentName"),
    ("Scores", "scores"),
    ("Overall Readiness Index", "overallIndex"),
    ("Readiness Level", "readinessLevel"),
    ("Strengths", "strengths"),
    ("Gaps", "gaps"),
    ("Recommendations", "recommendations"),
)


def extract_json(text: str) -> dict:
    """Parse the span from the first ``{`` to the last ``}`` in ``text``."""
    match = _JSON_SPAN.search(text or "")
    if not match:
        raise NoJsonFound()
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        logger.warning("JSON span failed to parse: %s; raw: %.200s", exc, match.group(0))
        raise NoJsonFound(f"Language model response contained invalid JSON: {exc}") from exc
    return data


def is_blank(value: Any) -> bool:
    """True for values that can't fill a report field. Numeric zero is a value."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def lookup(data: Mapping[str, Any], *keys: str) -> Optional[Any]:
    """Return the first non-blank value stored under any of ``keys``."""
    for key in keys:
        value = data.get(key)
        if not is_blank(value):
            return value
    return None


def validate_payload(data: Mapping[str, Any]) -> dict:
    for canonical, camel in REQUIRED_FIELDS:
        if lookup(data, canonical, camel) is None:
            raise MissingField(canonical)
    return dict(data)


def parse_collaborator_reply(text: str) -> dict:
    """Extract and validate the report object from a raw model reply."""
    return validate_payload(extract_json(text))
