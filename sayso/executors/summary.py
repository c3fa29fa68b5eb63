"""Condenses per-target delivery results into one :class:`ActionSummary`."""

from __future__ import annotations

from sayso.skills.models import ActionSummary, SendResult


def summarize_sends(summary_type: str, results: list[SendResult]) -> ActionSummary:
    """Single target: its id and message id (or error).  Several: ``"n/m targets"``."""
    if len(results) == 1:
        only = results[0]
        if only.success:
            return ActionSummary(type=summary_type, target=only.target_id, id=only.msg_id)
        return ActionSummary(type=summary_type, target=only.target_id, note=only.error)

    succeeded = sum(1 for r in results if r.success)
    failed = [r.target_id for r in results if not r.success]
    summary = ActionSummary(type=summary_type, target=f"{succeeded}/{len(results)} targets")
    if failed:
        summary.note = f"failed: {', '.join(failed)}"
    return summary
