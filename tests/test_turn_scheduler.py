import pytest

from src.live_auction.domain.entities.auction_status import AuctionType, PlayerStatus
from src.live_auction.domain.exceptions import (
    BidBelowBasePriceError,
    NotCurrentPlayerError,
    NotTeamsTurnError,
    ValidationError,
)
from src.live_auction.domain.services.allocation_engine import AllocationEngine
from src.live_auction.domain.services.turn_scheduler import (
    NumberWiseFlow,
    PlayerBidFlow,
    TeamBidFlow,
    flow_for,
)


def test_flow_registry():
    assert isinstance(flow_for(AuctionType.PLAYER_BID), PlayerBidFlow)
    assert isinstance(flow_for(AuctionType.TEAM_BID), TeamBidFlow)
    assert isinstance(flow_for(AuctionType.NUMBER_WISE), NumberWiseFlow)


def test_player_bid_presents_players_in_order(auction_builder):
    auction = auction_builder(base_prices=[10, 20, 30])
    flow = flow_for(auction.auction_type)

    assert flow.current_player(auction).id == "p0"
    assert flow.current_team(auction) is None

    auction.current_auction.current_player_index = 1
    assert flow.current_player(auction).id == "p1"


def test_player_bid_pointer_wraps_over_available_players(auction_builder):
    auction = auction_builder(base_prices=[10, 20, 30])
    flow = flow_for(auction.auction_type)
    auction.players["p0"].status = PlayerStatus.SOLD
    auction.players["p1"].status = PlayerStatus.UNSOLD

    # Only p2 remains; any pointer value lands on it
    auction.current_auction.current_player_index = 2
    assert flow.current_player(auction).id == "p2"
    auction.current_auction.current_player_index = 7
    assert flow.current_player(auction).id == "p2"


def test_player_bid_terminal_when_nothing_available(auction_builder):
    auction = auction_builder(base_prices=[10])
    flow = flow_for(auction.auction_type)
    assert not flow.is_terminal(auction)

    auction.players["p0"].status = PlayerStatus.UNSOLD
    assert flow.is_terminal(auction)
    assert flow.current_player(auction) is None


def test_player_bid_rejects_other_players(auction_builder):
    auction = auction_builder(base_prices=[10, 20])
    flow = flow_for(auction.auction_type)

    with pytest.raises(NotCurrentPlayerError):
        flow.check_resolution(auction, auction.players["p1"], "t0")
    flow.check_resolution(auction, auction.players["p0"], "t0")


def test_player_bid_sale_price_floor(auction_builder):
    auction = auction_builder(base_prices=[100])
    flow = flow_for(auction.auction_type)

    with pytest.raises(BidBelowBasePriceError):
        flow.check_sale_price(auction, auction.players["p0"], 99)
    flow.check_sale_price(auction, auction.players["p0"], 100)


def test_team_rotation_wraps(auction_builder):
    auction = auction_builder(auction_type=AuctionType.NUMBER_WISE, team_count=3, base_prices=[0, 0, 0])
    flow = flow_for(auction.auction_type)

    seen = []
    for index in range(4):
        auction.current_auction.current_team_index = index
        seen.append(flow.current_team(auction).id)
    assert seen == ["t0", "t1", "t2", "t0"]
    assert flow.current_player(auction) is None


def test_advance_moves_only_the_owned_pointer(auction_builder):
    auction = auction_builder(auction_type=AuctionType.TEAM_BID, base_prices=[0, 0])
    flow = flow_for(auction.auction_type)

    assert flow.advance(auction) == {"currentAuction/currentTeamIndex": 1}
    assert flow.pointer_precondition(auction) == {"currentAuction/currentTeamIndex": 0}

    player_flow = flow_for(AuctionType.PLAYER_BID)
    assert player_flow.advance(auction) == {"currentAuction/currentPlayerIndex": 1}


def test_team_turn_rejects_team_out_of_turn(auction_builder):
    auction = auction_builder(auction_type=AuctionType.TEAM_BID, base_prices=[0, 0])
    flow = flow_for(auction.auction_type)

    with pytest.raises(NotTeamsTurnError):
        flow.check_resolution(auction, auction.players["p0"], "t1")
    flow.check_resolution(auction, auction.players["p0"], "t0")
    # Passing on a player needs no team
    flow.check_resolution(auction, auction.players["p1"], None)


def test_team_turn_price_must_not_be_negative(auction_builder):
    auction = auction_builder(auction_type=AuctionType.TEAM_BID)
    flow = flow_for(auction.auction_type)

    with pytest.raises(ValidationError):
        flow.check_sale_price(auction, auction.players["p0"], -5)
    # Base price is not a floor in turn-based auctions
    flow.check_sale_price(auction, auction.players["p0"], 0)


def test_team_turn_terminal_when_all_rosters_full(auction_builder):
    auction = auction_builder(auction_type=AuctionType.NUMBER_WISE, base_prices=[0, 0, 0])
    flow = flow_for(auction.auction_type)
    assert not flow.is_terminal(auction)

    auction.teams["t0"].players = ["p0"]
    assert not flow.is_terminal(auction)
    auction.teams["t1"].players = ["p1"]
    assert flow.is_terminal(auction)


def test_team_turn_terminal_when_no_players_left(auction_builder):
    auction = auction_builder(auction_type=AuctionType.TEAM_BID, base_prices=[0])
    flow = flow_for(auction.auction_type)
    auction.players["p0"].status = PlayerStatus.UNSOLD
    assert flow.is_terminal(auction)


def test_player_bid_resolutions_follow_player_order(auction_builder):
    auction = auction_builder(base_prices=[10, 20, 30, 40])
    engine = AllocationEngine()
    flow = flow_for(auction.auction_type)

    seen = []
    while not flow.is_terminal(auction):
        player = flow.current_player(auction)
        seen.append(player.id)
        auction = engine.mark_unsold(auction, player.id).apply_to(auction)

    assert seen == ["p0", "p1", "p2", "p3"]
    assert auction.current_auction.current_player_index == 4


def test_player_bid_next_player_after_a_sale(auction_builder):
    auction = auction_builder(base_prices=[10, 20, 30])
    engine = AllocationEngine()
    flow = flow_for(auction.auction_type)

    auction = engine.mark_sold(auction, "p0", "t0", 10).apply_to(auction)
    assert auction.current_auction.current_player_index == 1
    assert flow.current_player(auction).id == "p1"


def test_player_bid_pointer_steps_over_resolved_players(auction_builder):
    auction = auction_builder(base_prices=[10, 20, 30])
    flow = flow_for(auction.auction_type)
    auction.players["p1"].status = PlayerStatus.UNSOLD

    auction.current_auction.current_player_index = 1
    assert flow.current_player(auction).id == "p2"

    auction.players["p2"].status = PlayerStatus.SOLD
    assert flow.current_player(auction).id == "p0"


def test_number_wise_assigns_without_payment(auction_builder):
    auction = auction_builder(auction_type=AuctionType.NUMBER_WISE)
    flow = flow_for(auction.auction_type)

    with pytest.raises(ValidationError):
        flow.check_sale_price(auction, auction.players["p0"], 50)
    flow.check_sale_price(auction, auction.players["p0"], 0)
