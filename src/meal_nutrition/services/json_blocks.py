"""Tolerant JSON object extraction from free-form model output."""

import json


class JsonBlockError(ValueError):
    """Raised when no parseable JSON object is present in a text."""


def find_json_block(text: str) -> str | None:
    """Return the span from the first ``{`` to the last ``}``.

    Code fences, leading prose (brackets included) and trailing chatter around
    the object are ignored. Returns None when the text holds no candidate.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def load_json_block(text: str) -> object:
    """Parse the JSON object embedded in text or raise JsonBlockError."""
    block = find_json_block(text)
    if block is None:
        raise JsonBlockError("No JSON object found")
    try:
        return json.loads(block)
    except json.JSONDecodeError as exc:
        raise JsonBlockError(f"Invalid JSON object: {exc.msg}") from exc
