"""Placeholder store and ``{{key}}`` substitution.

The planner cannot know values such as the URL of a document that has not
been created yet, so it writes ``{{doc_url}}`` instead.  Completed tasks and
executed actions publish values into a :class:`PlaceholderStore`; later
tasks and actions are passed through :func:`substitute` before they run.

Known keys: ``doc_url``, ``doc_id``, ``folder_url``, ``folder_id``,
``last_url``, ``last_note``.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Mapping

from sayso.skills.models import ActionSummary

PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


class PlaceholderStore:
    """Request-scoped mapping from placeholder key to its latest value.

    Reads and writes are serialised with a lock so that results merged from
    concurrently finished tasks never interleave.  Last writer wins.
    """

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._lock = threading.Lock()
        self._values: dict[str, str] = dict(initial or {})

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._values

    def get(self, key: str, default: str | None = None) -> str | None:
        with self._lock:
            return self._values.get(key, default)

    def snapshot(self) -> dict[str, str]:
        """Return a point-in-time copy of all values."""
        with self._lock:
            return dict(self._values)

    def update(self, outputs: Mapping[str, str]) -> None:
        """Merge *outputs* into the store.  Empty values are ignored."""
        if not outputs:
            return
        with self._lock:
            for key, value in outputs.items():
                if value:
                    self._values[key] = value

    def update_many(self, batches: list[Mapping[str, str]]) -> None:
        """Merge several output mappings in order, under a single lock."""
        with self._lock:
            for outputs in batches:
                for key, value in outputs.items():
                    if value:
                        self._values[key] = value


def substitute(data, values: Mapping[str, str]):
    """Replace ``{{key}}`` tokens in *data* with ``values[key]``.

    Walks strings, lists, tuples and string-keyed mappings recursively and
    returns a new structure; other values are returned unchanged.  Tokens
    whose key is missing stay as literal text.  Replacement values are not
    scanned again, so the result is stable across repeated calls.
    """
    if isinstance(data, str):
        return _substitute_string(data, values)
    if isinstance(data, Mapping):
        return {key: substitute(value, values) for key, value in data.items()}
    if isinstance(data, list):
        return [substitute(item, values) for item in data]
    if isinstance(data, tuple):
        return tuple(substitute(item, values) for item in data)
    return data


def _substitute_string(text: str, values: Mapping[str, str]) -> str:
    if not values or "{{" not in text:
        return text

    def _replace(match: re.Match) -> str:
        value = values.get(match.group(1))
        return match.group(0) if value is None else value

    return PLACEHOLDER_RE.sub(_replace, text)


def find_placeholders(data) -> set[str]:
    """Return every placeholder key referenced anywhere in *data*."""
    if isinstance(data, str):
        return set(PLACEHOLDER_RE.findall(data))
    if isinstance(data, Mapping):
        found: set[str] = set()
        for value in data.values():
            found |= find_placeholders(value)
        return found
    if isinstance(data, (list, tuple)):
        found = set()
        for item in data:
            found |= find_placeholders(item)
        return found
    return set()


# Which placeholder keys an executed action publishes, by action type.
_OUTPUT_KEYS: dict[str, dict[str, tuple[str, ...]]] = {
    "feishu_create_doc": {
        "url": ("doc_url", "last_url"),
        "id": ("doc_id",),
        "note": ("last_note",),
    },
    "feishu_create_folder": {
        "url": ("folder_url", "last_url"),
        "id": ("folder_id",),
        "note": ("last_note",),
    },
}


def outputs_from_summary(action_type: str, summary: ActionSummary) -> dict[str, str]:
    """Map an executed action's summary to the placeholder values it yields."""
    outputs: dict[str, str] = {}
    for field, keys in _OUTPUT_KEYS.get(action_type, {}).items():
        value = getattr(summary, field)
        if value:
            for key in keys:
                outputs[key] = value
    return outputs
