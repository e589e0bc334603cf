"""
Claim reconciliation for the reward leaderboard.

Turns raw claim attempts into per-account totals using the same-day dedup rule:
a failed attempt is not counted when the same account has a successful claim on
the same calendar date. Successes are always counted.
"""

import dataclasses
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, Hashable, Iterable, List, Optional

import pytz

from rewards.config import Config
from rewards.constants import ClaimStatus
from rewards.data_models.claims import AccountAggregate, ClaimRecord

logger = logging.getLogger(__name__)


def parse_claimed_at(value) -> Optional[datetime]:
    """
    Parse a claim timestamp into an aware datetime.

    Accepts datetimes and ISO-8601 strings. Naive values are taken as UTC.
    Returns None when the value cannot be interpreted as a point in time.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ReconciliationEngine:
    """Applies the same-day dedup rule to claim records."""

    def __init__(self, timezone_name: Optional[str] = None):
        """
        Initialize the engine.

        Args:
            timezone_name: Reference timezone for calendar-date bucketing,
                defaults to Config.REFERENCE_TIMEZONE
        """
        self.timezone = pytz.timezone(timezone_name or Config.REFERENCE_TIMEZONE)

    def reconcile_account(self, account_id: str, records: Iterable[ClaimRecord]) -> AccountAggregate:
        """
        Reconcile all windowed records of one account into an aggregate.

        Records are grouped by calendar date in the reference timezone. A record
        whose timestamp cannot be parsed forms a bucket of its own and never
        shares a date with any other record.
        """
        buckets: Dict[Hashable, List[ClaimRecord]] = defaultdict(list)
        last_claimed: Optional[datetime] = None

        for index, record in enumerate(records):
            claimed_at = parse_claimed_at(record.claimed_at)
            if claimed_at is None:
                logger.debug(f"Unparseable claimed_at {record.claimed_at!r} for account {account_id}, isolating record")
                buckets[('unparsed', index)].append(record)
                continue

            buckets[claimed_at.astimezone(self.timezone).date()].append(record)
            if last_claimed is None or claimed_at > last_claimed:
                last_claimed = claimed_at

        successful_claims = 0
        failed_claims = 0
        total_items_claimed = 0

        for bucket in buckets.values():
            has_success = any(record.is_success for record in bucket)
            for record in bucket:
                if record.status == ClaimStatus.SUCCESS:
                    successful_claims += 1
                    total_items_claimed += len(record.items_claimed)
                elif record.status == ClaimStatus.FAILED:
                    if not has_success:
                        failed_claims += 1
                else:
                    logger.warning(f"Ignoring claim with unknown status '{record.status}' for account {account_id}")

        return AccountAggregate(
            account_id=account_id,
            successful_claims=successful_claims,
            failed_claims=failed_claims,
            total_claims=successful_claims + failed_claims,
            total_items_claimed=total_items_claimed,
            last_claimed=last_claimed,
        )

    def reconcile_all(self, records: Iterable[ClaimRecord]) -> List[AccountAggregate]:
        """
        Reconcile a mixed record list into one aggregate per account.

        Aggregates come back in order of each account's first appearance in
        ``records``; ranking relies on this order for ties.
        """
        by_account: Dict[str, List[ClaimRecord]] = {}
        for record in records:
            by_account.setdefault(record.account_id, []).append(record)

        return [
            self.reconcile_account(account_id, account_records)
            for account_id, account_records in by_account.items()
        ]

    @staticmethod
    def verify_aggregate(aggregate: AccountAggregate) -> AccountAggregate:
        """
        Check the totals invariant, correcting the total if it disagrees.

        A mismatch is a data-integrity warning, never an error.
        """
        expected_total = aggregate.successful_claims + aggregate.failed_claims
        if aggregate.total_claims == expected_total:
            return aggregate

        logger.warning(
            f"Claim totals mismatch for account {aggregate.account_id}: "
            f"total={aggregate.total_claims}, successful={aggregate.successful_claims}, "
            f"failed={aggregate.failed_claims}. Using {expected_total}."
        )
        return dataclasses.replace(aggregate, total_claims=expected_total)
