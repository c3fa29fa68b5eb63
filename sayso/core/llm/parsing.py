"""JSON extraction from free-form model output."""

from __future__ import annotations

import json
import re

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


def parse_json(text: str) -> dict:
    """Best-effort extraction of a JSON object from LLM output.

    Handles plain JSON, responses wrapped in markdown ```json ... ``` fences,
    and prose surrounding a single ``{ ... }`` block.  Raises
    :class:`json.JSONDecodeError` when nothing parseable is found or the
    top-level value is not an object.
    """
    text = (text or "").strip()
    data = _first_parse(text)
    if not isinstance(data, dict):
        raise json.JSONDecodeError("Top-level JSON value is not an object", text, 0)
    return data


def _first_parse(text: str):
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    match = _FENCE_RE.search(text)
    if match:
        try:
            return json.loads(match.group(1).strip())
        except json.JSONDecodeError:
            pass

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and end > start:
        return json.loads(text[start : end + 1])

    raise json.JSONDecodeError("No JSON object found in response", text, 0)
