import pytest

from src.live_auction.domain.entities.auction import Auction
from src.live_auction.domain.entities.auction_status import (
    AuctionStatus,
    AuctionType,
    PlayerStatus,
)
from src.live_auction.domain.entities.player import Player
from src.live_auction.domain.entities.team import Team
from src.live_auction.domain.exceptions import (
    PlayerNotFoundError,
    StateConflictError,
    TeamNotFoundError,
    ValidationError,
)


def test_status_transitions():
    assert AuctionStatus.DRAFT.can_transition_to(AuctionStatus.LIVE)
    assert AuctionStatus.DRAFT.can_transition_to(AuctionStatus.SCHEDULED)
    assert AuctionStatus.SCHEDULED.can_transition_to(AuctionStatus.LIVE)
    assert AuctionStatus.LIVE.can_transition_to(AuctionStatus.COMPLETED)

    assert not AuctionStatus.LIVE.can_transition_to(AuctionStatus.DRAFT)
    assert not AuctionStatus.DRAFT.can_transition_to(AuctionStatus.COMPLETED)
    assert AuctionStatus.COMPLETED.next_statuses == []


def test_editable_statuses():
    assert AuctionStatus.DRAFT.is_editable
    assert AuctionStatus.SCHEDULED.is_editable
    assert not AuctionStatus.LIVE.is_editable
    assert not AuctionStatus.COMPLETED.is_editable


def test_auction_type_capabilities():
    assert AuctionType.PLAYER_BID.uses_bidding
    assert not AuctionType.PLAYER_BID.uses_team_turns
    assert AuctionType.TEAM_BID.uses_team_turns
    assert AuctionType.NUMBER_WISE.uses_team_turns
    assert AuctionType("numberWise") is AuctionType.NUMBER_WISE


def test_new_team_starts_with_full_budget():
    team = Team(id="t1", name="Lions", color="#FF5733", total_credits=500)
    assert team.remaining_credits == 500
    assert team.spent_credits == 0
    assert team.needs_players(3) == 3
    assert not team.is_full(3)


def test_negative_base_price_rejected():
    with pytest.raises(ValueError):
        Player(id="p1", name="Bad", base_price=-1)


def test_team_from_dict_without_players():
    team = Team.from_dict({"id": "t1", "name": "Lions", "color": "#FF5733", "totalCredits": 1000})
    assert team.players == []
    assert team.remaining_credits == 1000


def test_team_from_dict_with_indexed_players():
    team = Team.from_dict({
        "id": "t1", "name": "Lions", "color": "#FF5733",
        "totalCredits": 1000, "remainingCredits": 800,
        "players": {"1": "p2", "0": "p1"},
    })
    assert team.players == ["p1", "p2"]


def test_auction_wire_format(auction_builder):
    auction = auction_builder(auction_type=AuctionType.TEAM_BID)
    data = auction.to_dict()

    assert data["auctionType"] == "teamBid"
    assert data["totalCreditsPerTeam"] == 1000
    assert data["currentAuction"]["currentPlayerIndex"] == 0
    assert data["players"]["p0"]["basePrice"] == 100
    assert data["teams"]["t0"]["remainingCredits"] == 1000

    restored = Auction.from_dict(data)
    assert restored.auction_type == AuctionType.TEAM_BID
    assert restored.get_team("t1").name == "Team 1"
    assert restored.get_player("p0").status == PlayerStatus.AVAILABLE


def test_auction_from_dict_tolerates_missing_maps():
    auction = Auction.from_dict({"id": "a1", "auctionName": "Empty", "status": "draft"})
    assert auction.teams == {}
    assert auction.players == {}
    assert auction.current_auction.current_bid_amount == 0


def test_lookup_errors(auction_builder):
    auction = auction_builder()
    with pytest.raises(TeamNotFoundError):
        auction.get_team("missing")
    with pytest.raises(PlayerNotFoundError):
        auction.get_player("missing")


def test_ordered_views(auction_builder):
    auction = auction_builder(base_prices=[10, 20, 30])
    auction.players["p1"].status = PlayerStatus.SOLD

    assert [p.id for p in auction.available_players()] == ["p0", "p2"]
    assert [p.id for p in auction.sold_players()] == ["p1"]
    assert [t.id for t in auction.ordered_teams()] == ["t0", "t1"]


def test_validate_state_clean(auction_builder):
    auction = auction_builder()
    assert auction.validate_state() == []
    assert auction.credits_balanced


def test_validate_state_detects_broken_back_reference(auction_builder):
    auction = auction_builder()
    player = auction.players["p0"]
    player.status = PlayerStatus.SOLD
    player.assigned_to_team = "t0"
    player.final_price = 100
    # Roster list and credits never updated
    issues = auction.validate_state()

    assert any("missing from team roster" in issue for issue in issues)
    assert not auction.credits_balanced


def test_validation_error_collects_messages():
    error = ValidationError(["Please enter auction name", "Please enter venue"])
    assert error.errors == ["Please enter auction name", "Please enter venue"]
    assert "Please enter venue" in str(error)


def test_state_conflict_carries_snapshot(auction_builder):
    auction = auction_builder()
    error = StateConflictError("stale", auction)
    assert error.auction is auction
