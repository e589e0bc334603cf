from sqlalchemy import (
    Column, Integer, String, DateTime, Boolean, Text, JSON, Index, CheckConstraint
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

from rewards.constants import ClaimStatus
from rewards.data_models.claims import AccountProfile, ClaimRecord as ClaimRecordData

Base = declarative_base()

class ClaimRecord(Base):
    __tablename__ = 'claim_records'

    id = Column(Integer, primary_key=True)
    eight_ball_pool_id = Column(String(255), nullable=False, index=True)
    website_user_id = Column(String(255), nullable=False, index=True)
    status = Column(String(20), nullable=False, index=True)  # 'success' or 'failed'
    items_claimed = Column(JSON, nullable=False, default=list)
    error = Column(Text, nullable=True)

    # Stored as naive UTC
    claimed_at = Column(DateTime, nullable=False, default=func.now(), index=True)
    scheduler_run = Column(DateTime, nullable=False, index=True)

    __table_args__ = (
        Index('idx_claim_records_account_claimed_at', 'eight_ball_pool_id', 'claimed_at'),
        Index('idx_claim_records_composite', 'eight_ball_pool_id', 'status', 'claimed_at'),
        CheckConstraint(
            f"status IN ('{ClaimStatus.SUCCESS}', '{ClaimStatus.FAILED}')",
            name='ck_claim_records_status'
        ),
    )

    def to_record(self) -> ClaimRecordData:
        """Immutable snapshot handed to reconciliation."""
        return ClaimRecordData(
            account_id=self.eight_ball_pool_id,
            status=self.status,
            items_claimed=tuple(self.items_claimed or ()),
            claimed_at=self.claimed_at,
        )

    def __repr__(self):
        return f"<ClaimRecord(account='{self.eight_ball_pool_id}', status='{self.status}', claimed_at={self.claimed_at})>"

class Registration(Base):
    __tablename__ = 'registrations'

    id = Column(Integer, primary_key=True)
    eight_ball_pool_id = Column(String(255), nullable=False, unique=True, index=True)
    username = Column(String(255), nullable=False, index=True)

    # Discord identity
    discord_id = Column(String(255), nullable=True, index=True)
    discord_avatar_hash = Column(String(255), nullable=True)
    use_discord_avatar = Column(Boolean, default=False, nullable=False)
    use_discord_username = Column(Boolean, default=False, nullable=False)

    # Avatar sources
    eight_ball_pool_avatar_filename = Column(String(255), nullable=True)
    profile_image_url = Column(Text, nullable=True)
    leaderboard_image_url = Column(Text, nullable=True)

    # Filled in by the verification system
    account_level = Column(Integer, nullable=True, index=True)
    account_rank = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=func.now())

    def to_profile(self) -> AccountProfile:
        return AccountProfile(
            account_id=self.eight_ball_pool_id,
            username=self.username,
            discord_id=self.discord_id,
            discord_avatar_hash=self.discord_avatar_hash,
            use_discord_avatar=bool(self.use_discord_avatar),
            use_discord_username=bool(self.use_discord_username),
            eight_ball_pool_avatar_filename=self.eight_ball_pool_avatar_filename,
            profile_image_url=self.profile_image_url,
            leaderboard_image_url=self.leaderboard_image_url,
            account_level=self.account_level,
            account_rank=self.account_rank,
        )

    def __repr__(self):
        return f"<Registration(account='{self.eight_ball_pool_id}', username='{self.username}')>"
