"""Profile and streak API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from greensquares.api.dependencies import get_anonymous_github, get_user_github, upstream_error
from greensquares.services.github import GitHubClient, GitHubError, shape_profile
from greensquares.services.streaks import (
    estimate_streak_from_event_ratio,
    estimate_streak_from_recent_days,
    summarize_activity,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/me")
async def get_me(
    github: Annotated[GitHubClient, Depends(get_user_github)],
) -> dict:
    """Get the authenticated user's fresh profile with derived stats."""
    try:
        user = await github.get_authenticated_user()
        events = await github.get_user_events(user["login"])
    except GitHubError as e:
        logger.error(f"User data fetch error: {e}")
        raise upstream_error(e, "Failed to fetch user data") from e

    activity = summarize_activity(events)
    streak = estimate_streak_from_recent_days(events)

    return {
        "success": True,
        "user": shape_profile(user, detailed=True),
        "stats": {
            "recentContributions": activity.contribution_count,
            "lastActivity": activity.last_activity,
            "currentStreak": streak.current,
            "longestStreak": streak.longest,
            "totalContributions": activity.contribution_count,
        },
    }


@router.get("/user/{username}")
async def get_public_user(
    username: str,
    github: Annotated[GitHubClient, Depends(get_anonymous_github)],
) -> dict:
    """Get any user's public profile and recent contribution count."""
    try:
        user = await github.get_user(username)
        events = await github.get_public_events(username)
    except GitHubError as e:
        logger.error(f"User data fetch error for {username}: {e}")
        raise upstream_error(e, "Failed to fetch user data") from e

    activity = summarize_activity(events)

    return {
        "success": True,
        "user": shape_profile(user),
        "stats": {
            "recentContributions": activity.contribution_count,
            "lastActivity": activity.last_activity,
        },
    }


@router.get("/user/{username}/streak")
async def get_user_streak(
    username: str,
    github: Annotated[GitHubClient, Depends(get_anonymous_github)],
) -> dict:
    """Estimate a user's streak from their public contribution count."""
    try:
        events = await github.get_public_events(username)
    except GitHubError as e:
        logger.error(f"Streak calculation error for {username}: {e}")
        raise upstream_error(e, "Failed to calculate streak data") from e

    activity = summarize_activity(events)
    streak = estimate_streak_from_event_ratio(activity.contribution_count)

    return {
        "success": True,
        "streak": {
            "current": streak.current,
            "longest": streak.longest,
            "total_contributions": activity.contribution_count,
            "last_contribution": activity.last_activity,
        },
    }
