"""
Leaderboard data models for the reward claim leaderboard.

Provides immutable data transfer objects for ranked entries and the composed
responses handed to the HTTP layer.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple
from datetime import datetime

from rewards.data_models.claims import AccountAggregate


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class IdentityResolution:
    """Resolved display identity for one account."""
    display_username: str
    avatar_url: Optional[str]  # None -> caller renders initial-letter fallback


@dataclass(frozen=True)
class LeaderboardEntry:
    """Single leaderboard row."""
    rank: int
    account_id: str
    display_username: str
    avatar_url: Optional[str]
    successful_claims: int
    failed_claims: int
    total_claims: int
    total_items_claimed: int
    success_rate: int
    last_claimed: Optional[datetime]
    account_level: Optional[int] = None
    account_rank: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'rank': self.rank,
            'eightBallPoolId': self.account_id,
            'username': self.display_username,
            'avatarUrl': self.avatar_url,
            'successfulClaims': self.successful_claims,
            'failedClaims': self.failed_claims,
            'totalClaims': self.total_claims,
            'totalItemsClaimed': self.total_items_claimed,
            'successRate': self.success_rate,
            'lastClaimed': _iso(self.last_claimed),
            'accountLevel': self.account_level,
            'accountRank': self.account_rank,
        }


@dataclass(frozen=True)
class LeaderboardSummary:
    """Window-wide totals. Counts are raw, the same-day dedup rule is not applied."""
    total_users: int
    total_successful_claims: int
    total_failed_claims: int


@dataclass(frozen=True)
class LeaderboardResponse:
    """Composed leaderboard for one timeframe."""
    timeframe: str
    period: str
    total_users: int
    total_successful_claims: int
    total_failed_claims: int
    entries: Tuple[LeaderboardEntry, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            'timeframe': self.timeframe,
            'period': self.period,
            'totalUsers': self.total_users,
            'totalSuccessfulClaims': self.total_successful_claims,
            'totalFailedClaims': self.total_failed_claims,
            'leaderboard': [entry.to_dict() for entry in self.entries],
        }


@dataclass(frozen=True)
class AccountRanking:
    """A single account's position on the leaderboard."""
    rank: int
    aggregate: AccountAggregate
    display_username: str
    avatar_url: Optional[str]
    success_rate: int
    timeframe: str
    period: str

    def to_dict(self) -> dict:
        data = {'rank': self.rank}
        data.update(self.aggregate.to_dict())
        data.update({
            'username': self.display_username,
            'avatarUrl': self.avatar_url,
            'successRate': self.success_rate,
            'timeframe': self.timeframe,
            'period': self.period,
        })
        return data


@dataclass(frozen=True)
class LeaderboardStats:
    """Raw claim statistics over a timeframe."""
    timeframe: str
    period: str
    total_claims: int
    successful_claims: int
    total_items_claimed: int
    unique_users: int
    success_rate: int

    def to_dict(self) -> dict:
        return {
            'timeframe': self.timeframe,
            'period': self.period,
            'totalClaims': self.total_claims,
            'successfulClaims': self.successful_claims,
            'totalItemsClaimed': self.total_items_claimed,
            'uniqueUsers': self.unique_users,
            'successRate': self.success_rate,
        }
