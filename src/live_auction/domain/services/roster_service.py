"""
Roster Service - Domain Service

Builds new auctions, teams and players with their initial invariants:
full budgets, empty rosters, ``available`` status and an append-only
``order`` equal to the number of existing siblings.
"""

from typing import Optional

from ..entities.auction import Auction, CurrentAuctionState
from ..entities.auction_status import AuctionStatus, AuctionType, SportType
from ..entities.player import Player
from ..entities.team import Team
from ..exceptions import TeamLimitReachedError
from ...utils.constants import FREE_TEAM_LIMIT, TEAM_COLORS
from ...utils.helpers import can_add_team


class RosterService:
    """Factory for auction participants"""

    def __init__(self, free_team_limit: int = FREE_TEAM_LIMIT):
        self.free_team_limit = free_team_limit

    def new_auction(
        self,
        auction_id: str,
        owner_id: str,
        owner_name: str,
        referral_code: str,
        auction_name: str,
        auction_type: str,
        sport_type: str,
        total_credits_per_team: int,
        players_per_team: int,
        min_bid_increment: int,
        auction_date: int,
        venue: str,
        now: int,
        image_url: Optional[str] = None
    ) -> Auction:
        """Create an auction with no teams, no players and a neutral turn state"""
        return Auction(
            id=auction_id,
            owner_id=owner_id,
            owner_name=owner_name,
            auction_name=auction_name.strip(),
            referral_code=referral_code,
            auction_type=AuctionType(auction_type),
            sport_type=SportType(sport_type),
            total_credits_per_team=total_credits_per_team,
            players_per_team=players_per_team,
            min_bid_increment=min_bid_increment,
            auction_date=auction_date,
            venue=venue.strip(),
            image_url=image_url,
            current_auction=CurrentAuctionState(),
            status=AuctionStatus.DRAFT,
            created_at=now,
            updated_at=now
        )

    def check_team_limit(self, auction: Auction, has_subscription: bool) -> None:
        """Non-subscribers may only field a handful of teams"""
        if not can_add_team(auction.team_count, has_subscription, self.free_team_limit):
            raise TeamLimitReachedError(
                f"Free auctions are limited to {self.free_team_limit} teams. "
                f"Subscribe to add more teams."
            )

    def new_team(
        self,
        auction: Auction,
        team_id: str,
        name: str,
        color: Optional[str] = None,
        sponsor_name: Optional[str] = None,
        icon_url: Optional[str] = None
    ) -> Team:
        order = auction.team_count
        return Team(
            id=team_id,
            name=name.strip(),
            color=color or TEAM_COLORS[order % len(TEAM_COLORS)],
            total_credits=auction.total_credits_per_team,
            order=order,
            sponsor_name=sponsor_name,
            icon_url=icon_url
        )

    def new_player(
        self,
        auction: Auction,
        player_id: str,
        name: str,
        base_price: int,
        position: Optional[str] = None,
        image_url: Optional[str] = None
    ) -> Player:
        return Player(
            id=player_id,
            name=name.strip(),
            base_price=base_price,
            order=auction.player_count,
            position=position,
            image_url=image_url
        )
