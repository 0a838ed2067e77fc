"""Helpers for report tracking numbers, status timelines and dashboard stats."""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence
import secrets

from .constants import IN_PROGRESS_BUCKET, REPORT_NUMBER_PREFIX, STATUS_LABELS, STATUS_ORDER


def generate_report_number(now: Optional[datetime] = None) -> str:
    """Return a tracking number like CIV20241223-04817 (UTC date + 5 digits)."""
    now = now or datetime.now(timezone.utc)
    return f"{REPORT_NUMBER_PREFIX}{now:%Y%m%d}-{secrets.randbelow(100000):05d}"


def status_index(status: Optional[str]) -> int:
    """Position of `status` in the timeline, or -1 when it is outside it."""
    try:
        return STATUS_ORDER.index(status)
    except ValueError:
        return -1


def build_timeline(status: Optional[str]) -> Dict[str, Any]:
    """Render a status against the fixed five-step sequence.

    A step is completed when its index is at or before the current one.
    `rejected` (and any unknown value) completes nothing and is reported
    through `is_rejected` only.
    """
    current = status_index(status)
    steps = [
        {
            "status": step,
            "label": STATUS_LABELS[step],
            "completed": current >= i,
            "current": step == status,
        }
        for i, step in enumerate(STATUS_ORDER)
    ]
    progress = current / (len(STATUS_ORDER) - 1) if current > 0 else 0.0
    return {
        "status": status,
        "label": STATUS_LABELS.get(status or "", status),
        "is_rejected": status == "rejected",
        "progress": progress,
        "steps": steps,
    }


def compute_stats(statuses: Iterable[Optional[str]]) -> Dict[str, int]:
    """Dashboard tiles over an already-fetched set of report statuses."""
    stats = {"total": 0, "submitted": 0, "in_progress": 0, "resolved": 0}
    for status in statuses:
        stats["total"] += 1
        if status == "submitted":
            stats["submitted"] += 1
        elif status in IN_PROGRESS_BUCKET:
            stats["in_progress"] += 1
        elif status == "resolved":
            stats["resolved"] += 1
    return stats


def matches_search(query: str, *fields: Optional[str]) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    return any(needle in (value or "").lower() for value in fields)


def search_reports(reports: Sequence[Any], query: Optional[str]) -> List[Any]:
    """Case-insensitive substring filter over title, tracking number and city."""
    if not query or not query.strip():
        return list(reports)
    return [r for r in reports if matches_search(query, r.title, r.report_number, r.city)]
