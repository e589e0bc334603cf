"""
Read-side claim and registration queries.

ClaimOperations is the SQLAlchemy-backed data source for the leaderboard. It
only reads: claim records are written by the claiming process and registrations
by the account management flows.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import select

from rewards.data_models.claims import AccountProfile, ClaimRecord
from rewards.database.models import ClaimRecord as ClaimRecordModel, Registration
from rewards.services.base import BaseService

logger = logging.getLogger(__name__)


def _to_storage_utc(value: datetime) -> datetime:
    """Claim timestamps are stored as naive UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class ClaimOperations(BaseService):
    """Fetches claim records and account profiles for the leaderboard."""

    async def fetch_claim_records(
        self,
        account_id: Optional[str] = None,
        claimed_at_from: Optional[datetime] = None
    ) -> List[ClaimRecord]:
        """
        Fetch claim records, newest first.

        Args:
            account_id: Restrict to one 8 Ball Pool account
            claimed_at_from: Inclusive lower bound on claimed_at
        """
        query = select(ClaimRecordModel)
        if account_id is not None:
            query = query.where(ClaimRecordModel.eight_ball_pool_id == account_id)
        if claimed_at_from is not None:
            query = query.where(ClaimRecordModel.claimed_at >= _to_storage_utc(claimed_at_from))
        query = query.order_by(ClaimRecordModel.claimed_at.desc(), ClaimRecordModel.id.desc())

        async with self.get_session() as session:
            result = await session.execute(query)
            records = [row.to_record() for row in result.scalars().all()]

        logger.debug(f"Fetched {len(records)} claim records (account={account_id}, from={claimed_at_from})")
        return records

    async def fetch_account_profiles(
        self,
        discord_id: Optional[str] = None,
        account_id: Optional[str] = None,
        account_ids: Optional[Iterable[str]] = None
    ) -> List[AccountProfile]:
        """
        Fetch registrations as account profiles.

        Filters combine with AND; with no filter every registration is returned.
        """
        query = select(Registration)
        if discord_id is not None:
            query = query.where(Registration.discord_id == discord_id)
        if account_id is not None:
            query = query.where(Registration.eight_ball_pool_id == account_id)
        if account_ids is not None:
            ids = list(account_ids)
            if not ids:
                return []
            query = query.where(Registration.eight_ball_pool_id.in_(ids))
        query = query.order_by(Registration.id)

        async with self.get_session() as session:
            result = await session.execute(query)
            return [row.to_profile() for row in result.scalars().all()]
