import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from src.live_auction.application.dto import AuctionDTO
from src.live_auction.application.mirror import AuctionMirror
from src.live_auction.domain.exceptions import AuctionError
from src.live_auction.infrastructure.config import load_settings
from src.live_auction.infrastructure.container import cleanup_container, initialize_container
from src.live_auction.utils.helpers import format_credits, format_timestamp

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """Configure logging settings"""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler("auction.log", encoding="utf-8")
        ]
    )


def describe(auction: AuctionDTO) -> str:
    """One-line state summary of an auction snapshot"""
    line = f"[{auction.status}] {auction.auction_name} ({auction.auction_type})"
    if auction.current_player_id:
        player = auction.get_player(auction.current_player_id)
        line += f" | on the block: {player.name}"
    if auction.current_team_id:
        team = auction.get_team(auction.current_team_id)
        line += f" | turn: {team.name}"
    if auction.current_bidding_team:
        leader = auction.get_team(auction.current_bidding_team)
        leader_name = leader.name if leader else auction.current_bidding_team
        line += f" | high bid {format_credits(auction.current_bid_amount)} by {leader_name}"
    sold = len(auction.players_with_status("sold"))
    line += f" | sold {sold}/{len(auction.players)}"
    if auction.is_terminal:
        line += " | nothing left to allocate"
    return line


async def watch(auction_id: str) -> None:
    service = initialize_container(load_settings()).get_auction_service()
    if await service.get_auction(auction_id) is None:
        raise SystemExit(f"Auction {auction_id} not found")

    mirror = AuctionMirror(lambda snapshot: print(describe(snapshot), flush=True))
    await mirror.attach(service, auction_id)
    logger.info(f"Watching auction {auction_id}")
    try:
        await asyncio.Event().wait()
    finally:
        await mirror.stop()


async def lookup(referral_code: str) -> None:
    service = initialize_container(load_settings()).get_auction_service()
    auction = await service.get_auction_by_referral_code(referral_code)
    if auction is None:
        raise SystemExit(f"No active auction for code {referral_code}")

    print(describe(auction))
    print(f"Venue: {auction.venue}")
    print(f"Date: {format_timestamp(auction.auction_date)}")
    print(f"Teams: {len(auction.teams)}, players: {len(auction.players)}")


async def run(args: argparse.Namespace) -> None:
    try:
        if args.command == "watch":
            await watch(args.auction_id)
        elif args.command == "lookup":
            await lookup(args.referral_code)
    except AuctionError as e:
        logger.error(f"{args.command} failed: {e}", exc_info=True)
        raise SystemExit(str(e)) from e
    finally:
        await cleanup_container()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Live sports-player auction engine")
    commands = parser.add_subparsers(dest="command", required=True)

    watch_parser = commands.add_parser("watch", help="Follow an auction and print every change")
    watch_parser.add_argument("auction_id")

    lookup_parser = commands.add_parser("lookup", help="Find an auction by its referral code")
    lookup_parser.add_argument("referral_code")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    setup_logging()
    args = build_parser().parse_args(argv)
    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(0)


if __name__ == "__main__":
    main()
