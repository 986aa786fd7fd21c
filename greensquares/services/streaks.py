"""Contribution and streak estimates from recent GitHub events.

GitHub's events API only returns a recent window (roughly the last 90
events), so none of these numbers are true calendar streaks. There are two
separate heuristics, used by different endpoints, and they are not meant to
agree with each other:

- ``estimate_streak_from_recent_days``: distinct UTC days with a push.
- ``estimate_streak_from_event_ratio``: contribution count divided down.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

CONTRIBUTION_EVENT_TYPES = frozenset({"PushEvent", "CreateEvent", "PullRequestEvent"})
PUSH_EVENT_TYPE = "PushEvent"

LONGEST_STREAK_MULTIPLIER = 1.5
CURRENT_STREAK_DIVISOR = 7
LONGEST_STREAK_DIVISOR = 3


@dataclass(frozen=True)
class StreakEstimate:
    current: int
    longest: int


@dataclass(frozen=True)
class ActivitySummary:
    contribution_count: int
    last_activity: str | None


def contribution_events(events: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Events that count as contributions, in upstream (newest first) order."""
    return [event for event in events if event.get("type") in CONTRIBUTION_EVENT_TYPES]


def summarize_activity(events: list[dict[str, Any]]) -> ActivitySummary:
    contributions = contribution_events(events)
    last_activity = contributions[0].get("created_at") if contributions else None
    return ActivitySummary(contribution_count=len(contributions), last_activity=last_activity)


def _utc_day(timestamp: str) -> str:
    """``2024-05-01T23:30:00-02:00`` -> ``2024-05-02``."""
    parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC).date().isoformat()


def estimate_streak_from_recent_days(events: list[dict[str, Any]]) -> StreakEstimate:
    """Streak from the number of distinct UTC days with at least one push.

    current = distinct push days in the window
    longest = max(current, floor(current * 1.5))
    """
    push_days = {
        _utc_day(event["created_at"])
        for event in events
        if event.get("type") == PUSH_EVENT_TYPE and event.get("created_at")
    }
    current = len(push_days)
    longest = max(current, int(current * LONGEST_STREAK_MULTIPLIER))
    return StreakEstimate(current=current, longest=longest)


def estimate_streak_from_event_ratio(contribution_count: int) -> StreakEstimate:
    """Streak from the contribution count alone.

    current = max(1, count // 7), longest = max(1, count // 3), both 0 when
    there are no contributions.
    """
    if contribution_count <= 0:
        return StreakEstimate(current=0, longest=0)
    return StreakEstimate(
        current=max(1, contribution_count // CURRENT_STREAK_DIVISOR),
        longest=max(1, contribution_count // LONGEST_STREAK_DIVISOR),
    )
