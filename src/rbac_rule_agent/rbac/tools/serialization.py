"""Compact JSON encoding for tool results."""

import json
from typing import Any


def to_json(value: Any) -> str:
    """Serialize a tool result without whitespace padding, keeping non-ASCII text (e.g. °F) readable."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
