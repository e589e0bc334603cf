"""
Identity resolution for leaderboard and dashboard rows.

Single home for the username/avatar priority chain so every call site shows
the same identity for an account.
"""

import logging
from typing import Optional

from rewards.config import Config
from rewards.constants import IdentityConstants
from rewards.data_models.claims import AccountProfile
from rewards.data_models.leaderboard import IdentityResolution

logger = logging.getLogger(__name__)


def _clean(value) -> Optional[str]:
    """Normalize an optional profile field to a stripped string or None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _is_nullish(value: Optional[str]) -> bool:
    return value is None or value in IdentityConstants.NULLISH_STRINGS


class IdentityResolver:
    """Resolves display username and avatar URL from an account profile."""

    def __init__(self, avatar_path_prefix: Optional[str] = None, discord_cdn_url: Optional[str] = None):
        prefix = avatar_path_prefix if avatar_path_prefix is not None else Config.AVATAR_PATH_PREFIX
        self.avatar_path_prefix = prefix.rstrip('/')
        self.discord_cdn_url = (discord_cdn_url or Config.DISCORD_CDN_URL).rstrip('/')

    def resolve(self, profile: Optional[AccountProfile], session_username: Optional[str] = None) -> IdentityResolution:
        """
        Resolve the identity shown for an account.

        Never raises; missing or malformed fields fall through to the next
        source, ending in the "Unknown" username and a None avatar.
        """
        if profile is None:
            return IdentityResolution(display_username=IdentityConstants.UNKNOWN_USERNAME, avatar_url=None)

        return IdentityResolution(
            display_username=self.resolve_username(profile, session_username),
            avatar_url=self.resolve_avatar_url(profile),
        )

    def resolve_username(self, profile: AccountProfile, session_username: Optional[str] = None) -> str:
        """
        Pick the display username.

        Discord display names need an authenticated Discord session. Without a
        caller-supplied ``session_username`` the stored username is shown even
        when the profile opted into its Discord name.
        """
        username = _clean(profile.username) or IdentityConstants.UNKNOWN_USERNAME

        if profile.use_discord_username and not _is_nullish(_clean(profile.discord_id)):
            discord_name = _clean(session_username)
            if discord_name:
                return discord_name
            logger.debug(f"No Discord session for account {profile.account_id}, using stored username")

        return username

    def resolve_avatar_url(self, profile: AccountProfile) -> Optional[str]:
        """Pick the avatar URL, first configured source wins."""
        leaderboard_image = _clean(profile.leaderboard_image_url)
        if leaderboard_image:
            return leaderboard_image

        discord_id = _clean(profile.discord_id)
        if profile.use_discord_avatar and not _is_nullish(discord_id):
            return self.discord_avatar_url(discord_id, profile.discord_avatar_hash)

        avatar_filename = _clean(profile.eight_ball_pool_avatar_filename)
        if avatar_filename:
            return f"{self.avatar_path_prefix}/{avatar_filename}"

        return _clean(profile.profile_image_url)

    def discord_avatar_url(self, discord_id: str, avatar_hash: Optional[str]) -> str:
        """Custom Discord avatar when a hash is stored, otherwise the default avatar."""
        avatar_hash = _clean(avatar_hash)
        if not _is_nullish(avatar_hash):
            return f"{self.discord_cdn_url}/avatars/{discord_id}/{avatar_hash}.png"

        try:
            index = int(discord_id) % IdentityConstants.DISCORD_DEFAULT_AVATAR_COUNT
        except ValueError:
            logger.warning(f"Failed to parse Discord ID {discord_id!r} for default avatar, using index 0")
            index = 0
        return f"{self.discord_cdn_url}/embed/avatars/{index}.png"
