"""
Turn Scheduler - Domain Service

Each auction type runs its own turn protocol. The protocols share one
capability interface so the allocation engine never branches on the type:

- playerBid: a player pointer walks the available players, every team may bid
- teamBid: a team pointer rotates through the teams, the team on turn picks
- numberWise: same rotation as teamBid, players are assigned without bidding

After every resolution exactly one pointer moves by one step. Reaching the
terminal condition only makes the auction eligible for completion; the owner
still has to complete it.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type

from ..entities.auction import Auction
from ..entities.auction_status import AuctionType, PlayerStatus
from ..entities.player import Player
from ..entities.team import Team
from ..exceptions import (
    BidBelowBasePriceError,
    NotCurrentPlayerError,
    NotTeamsTurnError,
    ValidationError,
)

PLAYER_INDEX_PATH = "currentAuction/currentPlayerIndex"
TEAM_INDEX_PATH = "currentAuction/currentTeamIndex"
BIDDING_TEAM_PATH = "currentAuction/currentBiddingTeam"
BID_AMOUNT_PATH = "currentAuction/currentBidAmount"


def neutral_bidding_state() -> Dict[str, Any]:
    """Delta that clears the bid on the table"""
    return {BIDDING_TEAM_PATH: None, BID_AMOUNT_PATH: 0}


class AuctionFlow(ABC):
    """Turn protocol for one auction type"""

    auction_type: AuctionType
    pointer_path: str

    @abstractmethod
    def pointer(self, auction: Auction) -> int:
        """Current value of the pointer this flow owns"""
        pass

    @abstractmethod
    def current_player(self, auction: Auction) -> Optional[Player]:
        """Player up for auction, if the flow presents players one by one"""
        pass

    @abstractmethod
    def current_team(self, auction: Auction) -> Optional[Team]:
        """Team on turn, if the flow rotates teams"""
        pass

    @abstractmethod
    def is_terminal(self, auction: Auction) -> bool:
        """Check if nothing is left to allocate"""
        pass

    @abstractmethod
    def check_resolution(self, auction: Auction, player: Player, team_id: Optional[str]) -> None:
        """Raise if this player/team pair can't be resolved right now"""
        pass

    @abstractmethod
    def check_sale_price(self, auction: Auction, player: Player, final_price: int) -> None:
        """Raise if the sale price is not acceptable for this protocol"""
        pass

    def advance(self, auction: Auction) -> Dict[str, Any]:
        """Pointer delta for one step"""
        return {self.pointer_path: self.pointer(auction) + 1}

    def pointer_precondition(self, auction: Auction) -> Dict[str, Any]:
        return {self.pointer_path: self.pointer(auction)}


class PlayerBidFlow(AuctionFlow):
    """Players come up one at a time; any team may bid"""

    auction_type = AuctionType.PLAYER_BID
    pointer_path = PLAYER_INDEX_PATH

    def pointer(self, auction: Auction) -> int:
        return auction.current_auction.current_player_index

    def current_player(self, auction: Auction) -> Optional[Player]:
        # The pointer indexes the full player list in order; resolved players
        # are stepped over, wrapping back to the start of the list
        players = auction.ordered_players()
        if not players:
            return None
        start = self.pointer(auction) % len(players)
        for offset in range(len(players)):
            candidate = players[(start + offset) % len(players)]
            if candidate.status == PlayerStatus.AVAILABLE:
                return candidate
        return None

    def current_team(self, auction: Auction) -> Optional[Team]:
        return None

    def is_terminal(self, auction: Auction) -> bool:
        return not auction.available_players()

    def check_resolution(self, auction: Auction, player: Player, team_id: Optional[str]) -> None:
        current = self.current_player(auction)
        if current is None or current.id != player.id:
            raise NotCurrentPlayerError(
                f"Player {player.name} is not the player up for auction",
                auction
            )

    def check_sale_price(self, auction: Auction, player: Player, final_price: int) -> None:
        if final_price < player.base_price:
            raise BidBelowBasePriceError(
                f"Sale price {final_price} is below {player.name}'s base price {player.base_price}",
                auction
            )


class TeamTurnFlow(AuctionFlow):
    """Teams take turns in insertion order, wrapping around"""

    pointer_path = TEAM_INDEX_PATH

    def pointer(self, auction: Auction) -> int:
        return auction.current_auction.current_team_index

    def current_player(self, auction: Auction) -> Optional[Player]:
        return None

    def current_team(self, auction: Auction) -> Optional[Team]:
        teams = auction.ordered_teams()
        if not teams:
            return None
        return teams[self.pointer(auction) % len(teams)]

    def is_terminal(self, auction: Auction) -> bool:
        if not auction.available_players():
            return True
        return all(team.is_full(auction.players_per_team) for team in auction.teams.values())

    def check_resolution(self, auction: Auction, player: Player, team_id: Optional[str]) -> None:
        # Passing on a player (unsold) is always the team on turn's call
        if team_id is None:
            return
        current = self.current_team(auction)
        if current is None or current.id != team_id:
            raise NotTeamsTurnError(
                f"It is not team {team_id}'s turn",
                auction
            )

    def check_sale_price(self, auction: Auction, player: Player, final_price: int) -> None:
        if final_price < 0:
            raise ValidationError("Final price cannot be negative")


class TeamBidFlow(TeamTurnFlow):
    auction_type = AuctionType.TEAM_BID


class NumberWiseFlow(TeamTurnFlow):
    """Straight picks in turn order; nothing is paid"""

    auction_type = AuctionType.NUMBER_WISE

    def check_sale_price(self, auction: Auction, player: Player, final_price: int) -> None:
        if final_price != 0:
            raise ValidationError(
                f"Players are assigned without payment in a numberWise auction, got {final_price}"
            )


_FLOWS: Dict[AuctionType, Type[AuctionFlow]] = {
    AuctionType.PLAYER_BID: PlayerBidFlow,
    AuctionType.TEAM_BID: TeamBidFlow,
    AuctionType.NUMBER_WISE: NumberWiseFlow,
}


def flow_for(auction_type: AuctionType) -> AuctionFlow:
    """Get the turn protocol for an auction type"""
    if auction_type not in _FLOWS:
        raise ValueError(f"No turn protocol defined for {auction_type}")
    return _FLOWS[auction_type]()
