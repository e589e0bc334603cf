"""
Command line access to the claim leaderboard.

Usage:
    python -m rewards.main leaderboard --timeframe 7d --limit 50
    python -m rewards.main rank <eight_ball_pool_id> --timeframe 30d
    python -m rewards.main stats --timeframe 1y
"""

import argparse
import logging
import asyncio
import json
import sys

from rewards.config import Config
from rewards.constants import TimeframeConstants
from rewards.database.claim_operations import ClaimOperations
from rewards.database.database import Database
from rewards.services.leaderboard import LeaderboardService
from rewards.utils.leaderboard_exceptions import AccountNotRankedError
from rewards.utils.logger import setup_logger

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Reward claim leaderboard')
    parser.add_argument('--database-url', default=None, help='Overrides DATABASE_URL')
    subparsers = parser.add_subparsers(dest='command', required=True)

    leaderboard = subparsers.add_parser('leaderboard', help='Show the ranked leaderboard')
    leaderboard.add_argument('--timeframe', default=TimeframeConstants.DEFAULT_TIMEFRAME)
    leaderboard.add_argument('--limit', type=int, default=Config.DEFAULT_LEADERBOARD_LIMIT)

    rank = subparsers.add_parser('rank', help="Show one account's ranking")
    rank.add_argument('account_id')
    rank.add_argument('--timeframe', default=TimeframeConstants.DEFAULT_TIMEFRAME)

    stats = subparsers.add_parser('stats', help='Show raw claim statistics')
    stats.add_argument('--timeframe', default=TimeframeConstants.DEFAULT_TIMEFRAME)

    return parser


async def run(args: argparse.Namespace) -> int:
    Config.validate()

    db = Database(args.database_url)
    await db.initialize()
    try:
        service = LeaderboardService(ClaimOperations(db.session_factory))

        if args.command == 'leaderboard':
            result = await service.compute_leaderboard(args.timeframe, args.limit)
        elif args.command == 'rank':
            try:
                result = await service.compute_account_ranking(args.account_id, args.timeframe)
            except AccountNotRankedError as e:
                print(e.user_message, file=sys.stderr)
                return 1
            if result is None:
                print("Leaderboard data is temporarily unavailable.", file=sys.stderr)
                return 1
        else:
            result = await service.compute_leaderboard_stats(args.timeframe)

        print(json.dumps(result.to_dict(), indent=2))
        return 0
    finally:
        await db.close()


def main():
    args = build_parser().parse_args()
    setup_logger('rewards')
    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)


if __name__ == '__main__':
    main()
