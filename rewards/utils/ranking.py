"""
Ranking utilities for the claim leaderboard.

Orders reconciled account aggregates by items claimed and builds leaderboard
rows. Shared by the leaderboard page and the single-account rank lookup so
both see the same ordering.
"""

import math
import logging
from typing import Iterable, List, Mapping, Optional, Sequence

from rewards.constants import ClaimStatus
from rewards.data_models.claims import AccountAggregate, AccountProfile, ClaimRecord
from rewards.data_models.leaderboard import LeaderboardEntry, LeaderboardSummary
from rewards.utils.identity import IdentityResolver
from rewards.utils.reconciliation import ReconciliationEngine

logger = logging.getLogger(__name__)


def calculate_success_rate(successful_claims: int, total_claims: int) -> int:
    """Whole-number success percentage, rounding halves up; 0 when there are no claims."""
    if total_claims <= 0:
        return 0
    rate = math.floor(successful_claims / total_claims * 100 + 0.5)
    return max(0, min(100, int(rate)))


class RankingEngine:
    """Ranks account aggregates into leaderboard entries."""

    def __init__(self, identity_resolver: Optional[IdentityResolver] = None):
        self.identity_resolver = identity_resolver or IdentityResolver()

    @staticmethod
    def sort_aggregates(aggregates: Iterable[AccountAggregate]) -> List[AccountAggregate]:
        """
        Sort by total items claimed, highest first.

        The sort is stable: accounts with equal totals keep their input order.
        No secondary key is applied.
        """
        verified = [ReconciliationEngine.verify_aggregate(aggregate) for aggregate in aggregates]
        return sorted(verified, key=lambda aggregate: aggregate.total_items_claimed, reverse=True)

    def rank_entries(
        self,
        aggregates: Iterable[AccountAggregate],
        profiles: Mapping[str, AccountProfile],
        limit: Optional[int] = None
    ) -> List[LeaderboardEntry]:
        """
        Build ranked leaderboard rows.

        Ranks are positions 1..N over the fully sorted list; truncation to
        ``limit`` happens afterwards.
        """
        ranked = self.sort_aggregates(aggregates)
        if limit is not None:
            ranked = ranked[:limit]

        entries = []
        for rank, aggregate in enumerate(ranked, start=1):
            profile = profiles.get(aggregate.account_id)
            if profile is None:
                logger.warning(f"No registration found for account {aggregate.account_id}")
            identity = self.identity_resolver.resolve(profile)

            entries.append(LeaderboardEntry(
                rank=rank,
                account_id=aggregate.account_id,
                display_username=identity.display_username,
                avatar_url=identity.avatar_url,
                successful_claims=aggregate.successful_claims,
                failed_claims=aggregate.failed_claims,
                total_claims=aggregate.total_claims,
                total_items_claimed=aggregate.total_items_claimed,
                success_rate=calculate_success_rate(aggregate.successful_claims, aggregate.total_claims),
                last_claimed=aggregate.last_claimed,
                account_level=profile.account_level if profile else None,
                account_rank=profile.account_rank if profile else None,
            ))

        return entries

    @staticmethod
    def rank_of(account_id: str, aggregates: Sequence[AccountAggregate]) -> Optional[int]:
        """
        Rank of one account: one more than the number of accounts with strictly
        more items claimed. Returns None if the account is not in ``aggregates``.
        """
        target = next((a for a in aggregates if a.account_id == account_id), None)
        if target is None:
            return None
        ahead = sum(1 for a in aggregates if a.total_items_claimed > target.total_items_claimed)
        return ahead + 1

    @staticmethod
    def summarize(records: Sequence[ClaimRecord]) -> LeaderboardSummary:
        """
        Window-wide totals over raw records.

        These counts deliberately skip the same-day dedup rule, so the failed
        total can exceed the sum of per-entry failed claims.
        """
        return LeaderboardSummary(
            total_users=len({record.account_id for record in records}),
            total_successful_claims=sum(1 for record in records if record.is_success),
            total_failed_claims=sum(1 for record in records if record.status == ClaimStatus.FAILED),
        )
