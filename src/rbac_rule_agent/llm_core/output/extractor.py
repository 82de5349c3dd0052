"""Extract a JSON value from the final text of a model run."""

import json
import re
from typing import Any

from ..exceptions import ExtractionError
from ..logger import get_logger

logger = get_logger(__name__)

# Models tend to wrap structured output in a ```json fence
JSON_FENCE_PATTERN = re.compile(r"```json\n?([\s\S]*?)\n?```")


def extract_json(text: Any, strict: bool = False) -> Any:
    """Parse the JSON rule object or array contained in ``text``.

    The first ```json fenced block is parsed if present; otherwise the whole text is
    parsed. Only a JSON object or array counts as extracted output. Scalars such as
    a quoted string or a bare number are treated like unparseable text, and the
    original string is returned unchanged. Callers must therefore be ready for
    either a dict/list or a raw string.

    Values that are not strings are assumed to be already-parsed output and are
    returned as they are. Together with the object/array rule this makes the
    function idempotent on its own results.

    Args:
        text: Final text of the model.
        strict: Raise instead of degrading to the raw string.

    Returns:
        The parsed dict or list, or ``text`` itself.

    Raises:
        ExtractionError: If ``strict`` is set and no JSON object or array could be parsed.
    """
    if not isinstance(text, str):
        return text

    match = JSON_FENCE_PATTERN.search(text)
    candidate = match.group(1) if match else text

    try:
        value = json.loads(candidate)
    except json.JSONDecodeError as exc:
        logger.debug(f"Output is not valid JSON ({'fenced' if match else 'plain'}): {exc}")
    else:
        if isinstance(value, (dict, list)):
            return value
        logger.debug(f"Output parsed to a JSON {type(value).__name__}, not an object or array.")

    if strict:
        logger.error("Could not extract JSON from model output.")
        raise ExtractionError(text)
    return text


class RuleOutputExtractor:
    """Callable wrapper around ``extract_json`` for use as a pluggable component."""

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict

    def extract(self, text: Any) -> Any:
        return extract_json(text, strict=self.strict)

    __call__ = extract
