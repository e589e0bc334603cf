"""
Claim data models for the reward leaderboard.

Immutable value objects handed over by the claim and registration stores, plus
the per-account aggregate produced by reconciliation.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union
from datetime import datetime

from rewards.constants import ClaimStatus


@dataclass(frozen=True)
class ClaimRecord:
    """One logged attempt to collect an in-game reward."""
    account_id: str
    status: str  # 'success' or 'failed'
    items_claimed: Tuple[str, ...]
    claimed_at: Union[datetime, str, None]  # raw values may fail to parse

    @property
    def is_success(self) -> bool:
        return self.status == ClaimStatus.SUCCESS


@dataclass(frozen=True)
class AccountProfile:
    """Registration fields that drive display identity."""
    account_id: str
    username: str
    discord_id: Optional[str] = None
    discord_avatar_hash: Optional[str] = None
    use_discord_avatar: bool = False
    use_discord_username: bool = False
    eight_ball_pool_avatar_filename: Optional[str] = None
    profile_image_url: Optional[str] = None
    leaderboard_image_url: Optional[str] = None
    account_level: Optional[int] = None
    account_rank: Optional[str] = None


@dataclass(frozen=True)
class AccountAggregate:
    """Reconciled claim totals for one account inside a window."""
    account_id: str
    successful_claims: int
    failed_claims: int
    total_claims: int
    total_items_claimed: int
    last_claimed: Optional[datetime]

    def to_dict(self) -> dict:
        return {
            'eightBallPoolId': self.account_id,
            'successfulClaims': self.successful_claims,
            'failedClaims': self.failed_claims,
            'totalClaims': self.total_claims,
            'totalItemsClaimed': self.total_items_claimed,
            'lastClaimed': self.last_claimed.isoformat() if self.last_claimed else None,
        }
