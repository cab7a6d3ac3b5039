import pytest

from src.live_auction.utils.constants import DAY_MS, REFERRAL_CODE_ALPHABET
from src.live_auction.utils.helpers import (
    can_add_team,
    can_start_auction,
    format_credits,
    format_timestamp,
    generate_deep_link,
    generate_push_id,
    generate_referral_code,
    generate_share_message,
    is_referral_code_valid,
    normalize_referral_code,
)
from src.live_auction.utils.tree_paths import (
    apply_updates,
    check_preconditions,
    get_path,
    prune_empty,
    set_path,
)


def test_push_ids_sort_by_time():
    earlier = generate_push_id(1_700_000_000_000)
    later = generate_push_id(1_700_000_000_001)

    assert len(earlier) == 20
    assert earlier < later
    assert generate_push_id() != generate_push_id()


def test_referral_codes():
    codes = {generate_referral_code() for _ in range(50)}
    assert len(codes) > 1
    for code in codes:
        assert len(code) == 8
        assert set(code) <= set(REFERRAL_CODE_ALPHABET)
    assert normalize_referral_code(" ab12cd34 ") == "AB12CD34"


def test_referral_validity_window():
    auction_date = 1_000 * DAY_MS
    assert is_referral_code_valid(auction_date, now=auction_date - DAY_MS)
    assert is_referral_code_valid(auction_date, now=auction_date + 2 * DAY_MS)
    assert not is_referral_code_valid(auction_date, now=auction_date + 2 * DAY_MS + 1)


def test_team_limit_gate():
    assert can_add_team(2, has_subscription=False)
    assert not can_add_team(3, has_subscription=False)
    assert can_add_team(30, has_subscription=True)


def test_start_check_messages():
    assert can_start_auction(5, 0, 2) == {"valid": False, "message": "Add at least one team"}
    assert can_start_auction(0, 2, 2) == {"valid": False, "message": "Add at least one player"}
    assert can_start_auction(20, 2, 11)["message"] == "Need 22 players (11 per team x 2 teams)"
    assert can_start_auction(22, 2, 11)["valid"]


def test_formatting():
    assert format_credits(1500000) == "1,500,000"
    assert format_timestamp(None) == "-"
    assert format_timestamp(0) == "-"
    assert format_timestamp(86_400_000) == "Jan 02, 1970 at 00:00 UTC"
    assert "ABCD1234" in generate_share_message("Cup", "ABCD1234")
    assert generate_deep_link("ABCD1234") == "auction://auction/ABCD1234"


def test_tree_paths():
    tree = {"teams": {"t1": {"players": ["p1"]}}}

    assert get_path(tree, "teams/t1/players/0") == "p1"
    assert get_path(tree, "teams/t2/name", "none") == "none"
    with pytest.raises(ValueError):
        get_path(tree, "/")

    set_path(tree, "teams/t2/name", "Tigers")
    assert tree["teams"]["t2"] == {"name": "Tigers"}
    set_path(tree, "teams/t3/name", None)
    assert "t3" not in tree["teams"]


def test_apply_updates_does_not_touch_input():
    original = {"currentAuction": {"currentBidAmount": 100, "currentBiddingTeam": "t1"}}
    updated = apply_updates(original, {
        "currentAuction/currentBiddingTeam": None,
        "currentAuction/currentBidAmount": 0,
    })

    assert updated == {"currentAuction": {"currentBidAmount": 0}}
    assert original["currentAuction"]["currentBiddingTeam"] == "t1"


def test_prune_and_preconditions():
    assert prune_empty({"a": None, "b": {}, "c": [], "d": {"e": None}, "f": 0}) == {"f": 0}

    tree = {"status": "live", "currentAuction": {"currentBidAmount": 0}}
    assert check_preconditions(tree, {"status": "live", "currentAuction/currentBiddingTeam": None}) is None
    assert check_preconditions(tree, {"status": "draft"}) == "status"
    assert check_preconditions(None, {"status": "live"}) == "status"
