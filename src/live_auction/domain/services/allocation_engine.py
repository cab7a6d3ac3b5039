"""
Allocation Engine - Domain Service

Validates live-session intents against an auction snapshot and turns them into
multi-path deltas. Nothing here performs I/O: the session controller writes
each delta to the store as one atomic update, guarded by the delta's
preconditions so that a concurrent writer can't slip in between the read and
the write.

Every delta preserves money conservation: credits leave a team only together
with the player they paid for.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..entities.auction import Auction
from ..entities.auction_status import AuctionType, PlayerStatus
from ..entities.player import Player
from ..entities.team import Team
from ..exceptions import (
    AuctionNotLiveError,
    DuplicateBidError,
    InsufficientCreditsError,
    InvalidAuctionTypeForOperationError,
    PlayerNotAvailableError,
    StateConflictError,
    TeamFullError,
)
from .turn_scheduler import (
    BID_AMOUNT_PATH,
    BIDDING_TEAM_PATH,
    AuctionFlow,
    flow_for,
    neutral_bidding_state,
)
from ...utils.tree_paths import apply_updates


@dataclass
class AllocationDelta:
    """A validated state change ready to be written atomically"""
    action: str
    updates: Dict[str, Any]
    expected: Dict[str, Any] = field(default_factory=dict)
    player_id: Optional[str] = None
    team_id: Optional[str] = None
    amount: int = 0

    def apply_to(self, auction: Auction) -> Auction:
        """Preview the auction after this delta"""
        return Auction.from_dict(apply_updates(auction.to_dict(), self.updates))


class AllocationEngine:
    """
    Domain service for bids, sold/unsold resolutions and turn selections.

    Turn handling is delegated to the auction type's flow; the engine only
    knows which pointer to guard, never how a given type moves it.
    """

    # ====================
    # Bidding
    # ====================

    def next_bid_amount(self, auction: Auction, player: Player) -> int:
        """Canonical next bid: base price first, then one increment at a time"""
        current = auction.current_auction.current_bid_amount
        if current == 0:
            return player.base_price
        return current + auction.min_bid_increment

    def place_bid(
        self,
        auction: Auction,
        team_id: str,
        player_id: str,
        proposed_amount: Optional[int] = None
    ) -> AllocationDelta:
        """
        Validate a bid and build its delta.

        ``proposed_amount`` is advisory: the accepted amount is always
        recomputed from the snapshot, so a client that rendered an old bid
        can't overbid by accident.
        """
        self._require_live(auction)
        self._require_type(auction, AuctionType.PLAYER_BID, "place a bid")
        flow = flow_for(auction.auction_type)

        player = auction.get_player(player_id)
        team = auction.get_team(team_id)
        self._require_available(auction, player)
        flow.check_resolution(auction, player, team_id)

        state = auction.current_auction
        if state.has_bid and state.current_bidding_team == team_id:
            raise DuplicateBidError(f"Team {team.name} already holds the highest bid", auction)

        self._require_roster_space(auction, team)

        accepted = self.next_bid_amount(auction, player)
        self._require_credits(auction, team, accepted)

        updates = {
            BIDDING_TEAM_PATH: team_id,
            BID_AMOUNT_PATH: accepted,
        }
        expected = {
            BID_AMOUNT_PATH: state.current_bid_amount,
            BIDDING_TEAM_PATH: state.current_bidding_team,
            f"players/{player_id}/status": PlayerStatus.AVAILABLE.value,
            **flow.pointer_precondition(auction),
        }
        return AllocationDelta(
            action="bid",
            updates=updates,
            expected=expected,
            player_id=player_id,
            team_id=team_id,
            amount=accepted
        )

    # ====================
    # Resolutions
    # ====================

    def mark_sold(
        self,
        auction: Auction,
        player_id: str,
        team_id: str,
        final_price: int
    ) -> AllocationDelta:
        """Assign a player to a team, charge the team and move the turn on"""
        self._require_live(auction)
        flow = flow_for(auction.auction_type)

        player = auction.get_player(player_id)
        team = auction.get_team(team_id)
        self._require_available(auction, player)
        flow.check_resolution(auction, player, team_id)
        flow.check_sale_price(auction, player, final_price)
        self._require_roster_space(auction, team)
        self._require_credits(auction, team, final_price)

        updates = {
            f"players/{player_id}/status": PlayerStatus.SOLD.value,
            f"players/{player_id}/assignedToTeam": team_id,
            f"players/{player_id}/finalPrice": final_price,
            f"teams/{team_id}/players": team.players + [player_id],
            f"teams/{team_id}/remainingCredits": team.remaining_credits - final_price,
        }
        updates.update(flow.advance(auction))
        updates.update(neutral_bidding_state())

        expected = {
            f"players/{player_id}/status": PlayerStatus.AVAILABLE.value,
            f"teams/{team_id}/remainingCredits": team.remaining_credits,
            **flow.pointer_precondition(auction),
        }
        return AllocationDelta(
            action="sold",
            updates=updates,
            expected=expected,
            player_id=player_id,
            team_id=team_id,
            amount=final_price
        )

    def sell_to_highest_bidder(self, auction: Auction) -> AllocationDelta:
        """
        Close the bidding on the current player.

        The sale is conditioned on the bid it was computed from, so a bid
        accepted elsewhere in the meantime makes the write fail instead of
        selling at the older price.
        """
        self._require_live(auction)
        state = auction.current_auction
        player = self.flow(auction).current_player(auction)
        if player is None or not state.has_bid:
            raise StateConflictError("No team has bid on this player", auction)

        delta = self.mark_sold(auction, player.id, state.current_bidding_team, state.current_bid_amount)
        delta.expected.update({
            BID_AMOUNT_PATH: state.current_bid_amount,
            BIDDING_TEAM_PATH: state.current_bidding_team,
        })
        return delta

    def mark_unsold(self, auction: Auction, player_id: str) -> AllocationDelta:
        """Pass on a player; no credits move"""
        self._require_live(auction)
        flow = flow_for(auction.auction_type)

        player = auction.get_player(player_id)
        self._require_available(auction, player)
        flow.check_resolution(auction, player, None)

        updates = {f"players/{player_id}/status": PlayerStatus.UNSOLD.value}
        updates.update(flow.advance(auction))
        updates.update(neutral_bidding_state())

        expected = {
            f"players/{player_id}/status": PlayerStatus.AVAILABLE.value,
            **flow.pointer_precondition(auction),
        }
        return AllocationDelta(
            action="unsold",
            updates=updates,
            expected=expected,
            player_id=player_id
        )

    def select_player(self, auction: Auction, team_id: str, player_id: str) -> AllocationDelta:
        """The team on turn takes a player outright"""
        self._require_live(auction)
        if not auction.auction_type.uses_team_turns:
            raise InvalidAuctionTypeForOperationError(
                f"Cannot select players directly in a {auction.auction_type.value} auction",
                auction
            )
        delta = self.mark_sold(auction, player_id, team_id, 0)
        delta.action = "select"
        return delta

    def skip_turn(self, auction: Auction) -> AllocationDelta:
        """Move past a team whose roster is already full"""
        self._require_live(auction)
        if not auction.auction_type.uses_team_turns:
            raise InvalidAuctionTypeForOperationError(
                f"Turns can't be skipped in a {auction.auction_type.value} auction",
                auction
            )
        flow = flow_for(auction.auction_type)
        team = flow.current_team(auction)
        if team is None or not team.is_full(auction.players_per_team):
            raise StateConflictError("Only a team with a full roster can be skipped", auction)

        updates = dict(flow.advance(auction))
        updates.update(neutral_bidding_state())
        return AllocationDelta(
            action="skip",
            updates=updates,
            expected=flow.pointer_precondition(auction),
            team_id=team.id
        )

    # ====================
    # Queries
    # ====================

    def flow(self, auction: Auction) -> AuctionFlow:
        return flow_for(auction.auction_type)

    # ====================
    # Guards
    # ====================

    def _require_live(self, auction: Auction) -> None:
        if not auction.is_live:
            raise AuctionNotLiveError(
                f"Auction {auction.id} is {auction.status.value}, not live",
                auction
            )

    def _require_type(self, auction: Auction, auction_type: AuctionType, operation: str) -> None:
        if auction.auction_type != auction_type:
            raise InvalidAuctionTypeForOperationError(
                f"Cannot {operation} in a {auction.auction_type.value} auction",
                auction
            )

    def _require_available(self, auction: Auction, player: Player) -> None:
        if not player.is_available:
            raise PlayerNotAvailableError(
                f"Player {player.name} is already {player.status.value}",
                auction
            )

    def _require_roster_space(self, auction: Auction, team: Team) -> None:
        if team.is_full(auction.players_per_team):
            raise TeamFullError(f"Team {team.name} already has a full roster", auction)

    def _require_credits(self, auction: Auction, team: Team, amount: int) -> None:
        if not team.can_afford(amount):
            raise InsufficientCreditsError(
                f"Team {team.name} has {team.remaining_credits} credits, needs {amount}",
                auction
            )
