"""
Timeframe utilities for leaderboard lookback windows.

Maps dashboard timeframe tokens to day counts and computes window boundaries.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from rewards.constants import TimeframeConstants


def get_days_from_timeframe(timeframe: Optional[str]) -> int:
    """
    Resolve a timeframe token (e.g. '7d') to a number of days.

    Unrecognized or missing tokens fall back to 7 days.
    """
    return TimeframeConstants.TIMEFRAME_DAYS.get(timeframe, TimeframeConstants.DEFAULT_DAYS)


def get_window_start(days: int, now: Optional[datetime] = None) -> datetime:
    """
    Compute the start of a lookback window.

    The window is a rolling ``now - days`` interval, not aligned to calendar
    days. Naive ``now`` values are taken as UTC.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now - timedelta(days=days)


def format_period(days: int) -> str:
    """Human-readable period label used in leaderboard responses."""
    return f"{days} days"
