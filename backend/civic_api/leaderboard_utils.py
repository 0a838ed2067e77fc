"""Ranking helpers for the leaderboard."""

from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Sequence


def count_badges(user_ids: Iterable[str]) -> Dict[str, int]:
    """Count badge-membership rows per user."""
    return dict(Counter(user_ids))


def rank_profiles(profiles: Sequence[Any], badge_counts: Dict[str, int]) -> List[Dict[str, Any]]:
    """Attach 1-based ranks (fetch order) and badge counts to ordered profiles."""
    return [
        {
            "rank": position,
            "user_id": p.user_id,
            "full_name": p.full_name,
            "city": p.city,
            "points": p.points or 0,
            "badge_count": badge_counts.get(p.user_id, 0),
        }
        for position, p in enumerate(profiles, start=1)
    ]


def find_entry(entries: Sequence[Dict[str, Any]], user_id: str) -> Optional[Dict[str, Any]]:
    for entry in entries:
        if entry["user_id"] == user_id:
            return entry
    return None
