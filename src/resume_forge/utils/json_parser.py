"""Pull a JSON object out of free-form model output."""

from __future__ import annotations

import json
import re

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE)
_FENCE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


def clean_model_text(text: str) -> str:
    """Drop reasoning blocks and markdown code fences around the payload."""
    text = _THINK_BLOCK.sub("", text or "").strip()
    return _FENCE.sub("", text).strip()


def extract_json(text: str) -> dict:
    """Parse the JSON object in a model response.

    Tries the cleaned text as-is, then the span from the first ``{`` to the
    last ``}``. Output cut off mid-object is not repaired.

    Raises:
        ValueError: if no JSON object can be recovered.
    """
    cleaned = clean_model_text(text)

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        parsed = _object_span(cleaned)

    if not isinstance(parsed, dict):
        raise ValueError(f"No JSON object in model output: {cleaned[:200]!r}")
    return parsed


def _object_span(text: str) -> dict | None:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        return json.loads(text[start : end + 1])
    except json.JSONDecodeError:
        return None
