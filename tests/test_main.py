import pytest

from main import build_parser, describe
from src.live_auction.application.dto import AuctionDTO
from src.live_auction.domain.entities.auction_status import AuctionType


def test_parser_commands():
    parser = build_parser()

    args = parser.parse_args(["watch", "Nabc123"])
    assert args.command == "watch"
    assert args.auction_id == "Nabc123"

    args = parser.parse_args(["lookup", "ABCD1234"])
    assert args.referral_code == "ABCD1234"

    with pytest.raises(SystemExit):
        parser.parse_args([])


def test_describe_player_bid(auction_builder):
    auction = auction_builder(base_prices=[100, 100])
    auction.current_auction.current_bidding_team = "t1"
    auction.current_auction.current_bid_amount = 1500

    line = describe(AuctionDTO.from_domain(auction))
    assert line.startswith("[live] Premier League (playerBid)")
    assert "on the block: Player 0" in line
    assert "high bid 1,500 by Team 1" in line
    assert "sold 0/2" in line


def test_describe_team_turns(auction_builder):
    auction = auction_builder(auction_type=AuctionType.NUMBER_WISE)
    auction.current_auction.current_team_index = 1

    line = describe(AuctionDTO.from_domain(auction))
    assert "turn: Team 1" in line
    assert "on the block" not in line
