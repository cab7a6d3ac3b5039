import pytest

from src.live_auction.domain.exceptions import PreconditionFailedError


@pytest.mark.asyncio
async def test_create_and_read(store):
    data = {"auctionName": "Cup", "referralCode": "ABCD1234", "teams": {}}
    auction_id = await store.create(data)

    assert data["id"] == auction_id
    assert len(auction_id) == 20
    stored = await store.read(auction_id)
    assert stored == {"id": auction_id, "auctionName": "Cup", "referralCode": "ABCD1234"}
    assert store.get_auction_count() == 1


@pytest.mark.asyncio
async def test_reads_are_copies(store):
    auction_id = await store.create({"venue": "Ground"})
    snapshot = await store.read(auction_id)
    snapshot["venue"] = "Changed"

    assert (await store.read(auction_id))["venue"] == "Ground"


@pytest.mark.asyncio
async def test_multi_path_update(store):
    auction_id = await store.create({
        "players": {"p1": {"status": "available", "assignedToTeam": None}},
        "currentAuction": {"currentBidAmount": 100, "currentBiddingTeam": "t1"},
    })

    await store.update(auction_id, {
        "players/p1/status": "sold",
        "players/p1/assignedToTeam": "t1",
        "teams/t1/players": ["p1"],
        "currentAuction/currentBiddingTeam": None,
        "currentAuction/currentBidAmount": 0,
    })

    stored = await store.read(auction_id)
    assert stored["players"]["p1"] == {"status": "sold", "assignedToTeam": "t1"}
    assert stored["teams"]["t1"]["players"] == ["p1"]
    assert stored["currentAuction"] == {"currentBidAmount": 0}


@pytest.mark.asyncio
async def test_failed_precondition_writes_nothing(store):
    auction_id = await store.create({"currentAuction": {"currentBidAmount": 150}})

    with pytest.raises(PreconditionFailedError) as exc_info:
        await store.update(
            auction_id,
            {"currentAuction/currentBidAmount": 200, "venue": "Elsewhere"},
            expected={"currentAuction/currentBidAmount": 100}
        )

    assert exc_info.value.path == "currentAuction/currentBidAmount"
    assert await store.read(auction_id) == {"id": auction_id, "currentAuction": {"currentBidAmount": 150}}


@pytest.mark.asyncio
async def test_missing_value_matches_expected_none(store):
    auction_id = await store.create({"currentAuction": {"currentBidAmount": 0}})
    await store.update(
        auction_id,
        {"currentAuction/currentBiddingTeam": "t1"},
        expected={"currentAuction/currentBiddingTeam": None}
    )
    assert (await store.read(auction_id))["currentAuction"]["currentBiddingTeam"] == "t1"


@pytest.mark.asyncio
async def test_query_and_delete(store):
    first = await store.create({"ownerId": "o1", "referralCode": "AAAA0000"})
    await store.create({"ownerId": "o2", "referralCode": "BBBB0000"})

    rows = await store.query("referralCode", "AAAA0000")
    assert [row["id"] for row in rows] == [first]
    assert len(await store.query("ownerId", "o2")) == 1
    assert await store.query("ownerId", "nobody") == []

    await store.delete(first)
    assert await store.read(first) is None
    assert await store.query("referralCode", "AAAA0000") == []


@pytest.mark.asyncio
async def test_subscribers_get_initial_and_ordered_snapshots(store):
    auction_id = await store.create({"currentAuction": {"currentBidAmount": 0}})
    received = []

    async def on_change(snapshot):
        received.append(snapshot["currentAuction"]["currentBidAmount"])

    unsubscribe = await store.subscribe(auction_id, on_change)
    for amount in (100, 150, 200):
        await store.update(auction_id, {"currentAuction/currentBidAmount": amount})
    await store.flush()

    assert received == [0, 100, 150, 200]

    await unsubscribe()
    await store.update(auction_id, {"currentAuction/currentBidAmount": 250})
    await store.flush()
    assert received == [0, 100, 150, 200]


@pytest.mark.asyncio
async def test_failing_subscriber_keeps_receiving(store):
    auction_id = await store.create({"venue": "A"})
    received = []

    def on_change(snapshot):
        received.append(snapshot["venue"])
        if snapshot["venue"] == "B":
            raise RuntimeError("listener bug")

    await store.subscribe(auction_id, on_change)
    await store.update(auction_id, {"venue": "B"})
    await store.update(auction_id, {"venue": "C"})
    await store.flush()

    assert received == ["A", "B", "C"]
