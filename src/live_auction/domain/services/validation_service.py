"""
Validation Service - Domain Service

Input and lifecycle validation for everything that happens before and around
the live session. Methods return a list of human readable problems; an empty
list means the input is acceptable.
"""

from typing import List, Optional

from ..entities.auction import Auction
from ..entities.auction_status import AuctionType, SportType
from ...utils.constants import TEAM_COLORS
from ...utils.helpers import can_start_auction


class ValidationService:
    """Domain service for validation operations"""

    def validate_auction_creation(
        self,
        auction_name: str,
        venue: str,
        auction_type: str,
        sport_type: str,
        total_credits_per_team: int,
        players_per_team: int,
        min_bid_increment: int,
        auction_date: int,
        now: int
    ) -> List[str]:
        """Validate a new auction's configuration"""
        errors = []

        if not auction_name or not auction_name.strip():
            errors.append("Please enter auction name")

        if not venue or not venue.strip():
            errors.append("Please enter venue")

        if auction_type not in [t.value for t in AuctionType]:
            errors.append(f"Unknown auction type: {auction_type}")

        if sport_type not in [s.value for s in SportType]:
            errors.append(f"Unknown sport type: {sport_type}")

        errors.extend(self.validate_configuration(
            total_credits_per_team, players_per_team, min_bid_increment
        ))

        if auction_date <= now:
            errors.append("Auction date must be in the future")

        return errors

    def validate_configuration(
        self,
        total_credits_per_team: Optional[int],
        players_per_team: Optional[int],
        min_bid_increment: Optional[int]
    ) -> List[str]:
        """Validate the numeric knobs; None means 'not being changed'"""
        errors = []

        if total_credits_per_team is not None and total_credits_per_team <= 0:
            errors.append("Credits per team must be greater than 0")

        if players_per_team is not None and players_per_team <= 0:
            errors.append("Players per team must be greater than 0")

        if min_bid_increment is not None and min_bid_increment <= 0:
            errors.append("Minimum bid increment must be greater than 0")

        return errors

    def validate_team_input(self, auction: Auction, name: str, color: Optional[str]) -> List[str]:
        errors = self._validate_editable(auction)

        if not name or not name.strip():
            errors.append("Please enter team name")

        if color is not None and color not in TEAM_COLORS:
            errors.append(f"Color {color} is not in the team palette")

        return errors

    def validate_player_input(self, auction: Auction, name: str, base_price: int) -> List[str]:
        errors = self._validate_editable(auction)

        if not name or not name.strip():
            errors.append("Please enter player name")

        if base_price is None or base_price < 0:
            errors.append("Base price cannot be negative")

        return errors

    def validate_start(self, auction: Auction) -> List[str]:
        """Pre-start roster check; equality of players and slots is enough"""
        result = can_start_auction(
            auction.player_count, auction.team_count, auction.players_per_team
        )
        if not result["valid"]:
            return [result["message"]]
        return []

    def _validate_editable(self, auction: Auction) -> List[str]:
        if not auction.status.is_editable:
            return [f"Cannot change participants of a {auction.status.value} auction"]
        return []
