import pytest
import pytest_asyncio
from typing import Dict, List, Optional, Tuple

from src.live_auction.application.auction_service import AuctionSessionService
from src.live_auction.application.dto import (
    AddPlayerInput,
    AddTeamInput,
    AuctionDTO,
    CreateAuctionInput,
    PlayerDTO,
    TeamDTO,
)
from src.live_auction.domain.entities.auction import Auction, CurrentAuctionState
from src.live_auction.domain.entities.auction_status import AuctionStatus, AuctionType, SportType
from src.live_auction.domain.entities.player import Player
from src.live_auction.domain.entities.team import Team
from src.live_auction.infrastructure.blob_storage import MemoryBlobStorage
from src.live_auction.infrastructure.mock_adapters import MockIdentityProvider
from src.live_auction.infrastructure.storage_adapter import MemoryAuctionStore
from src.live_auction.utils.constants import DAY_MS
from src.live_auction.utils.helpers import now_ms

OWNER_ID = "owner-1"


def build_auction(
    auction_type: AuctionType = AuctionType.PLAYER_BID,
    team_count: int = 2,
    base_prices: Optional[List[int]] = None,
    players_per_team: int = 1,
    credits: int = 1000,
    increment: int = 50,
    status: AuctionStatus = AuctionStatus.LIVE
) -> Auction:
    """Domain auction with teams t0..tN and players p0..pN in insertion order"""
    base_prices = [100] if base_prices is None else base_prices
    teams: Dict[str, Team] = {
        f"t{i}": Team(id=f"t{i}", name=f"Team {i}", color="#FF5733", total_credits=credits, order=i)
        for i in range(team_count)
    }
    players: Dict[str, Player] = {
        f"p{i}": Player(id=f"p{i}", name=f"Player {i}", base_price=price, order=i)
        for i, price in enumerate(base_prices)
    }
    return Auction(
        id="auction-1",
        owner_id=OWNER_ID,
        owner_name="Olivia Owner",
        auction_name="Premier League",
        referral_code="ABCD1234",
        auction_type=auction_type,
        sport_type=SportType.CRICKET,
        total_credits_per_team=credits,
        players_per_team=players_per_team,
        min_bid_increment=increment,
        auction_date=now_ms() + DAY_MS,
        venue="Main Ground",
        teams=teams,
        players=players,
        current_auction=CurrentAuctionState(is_active=status == AuctionStatus.LIVE),
        status=status
    )


@pytest.fixture
def auction_builder():
    """Factory for in-memory domain auctions"""
    return build_auction


@pytest.fixture
def identity() -> MockIdentityProvider:
    provider = MockIdentityProvider()
    provider.add_user(OWNER_ID, "Olivia Owner")
    return provider


@pytest_asyncio.fixture
async def store():
    store = MemoryAuctionStore()
    yield store
    await store.close()


@pytest.fixture
def blob_storage() -> MemoryBlobStorage:
    return MemoryBlobStorage()


@pytest.fixture
def service(store, identity, blob_storage) -> AuctionSessionService:
    return AuctionSessionService(store, identity, blob_storage=blob_storage)


def auction_input(**overrides) -> CreateAuctionInput:
    values = dict(
        auction_name="Premier League",
        sport_type="cricket",
        auction_type="playerBid",
        total_credits_per_team=1000,
        players_per_team=1,
        min_bid_increment=50,
        auction_date=now_ms() + DAY_MS,
        venue="Main Ground",
    )
    values.update(overrides)
    return CreateAuctionInput(**values)


@pytest.fixture
def make_input():
    """Factory for CreateAuctionInput with sensible defaults"""
    return auction_input


@pytest.fixture
def setup_auction(service):
    """Create an auction through the service, add participants and optionally start it"""

    async def _setup(
        auction_type: str = "playerBid",
        team_count: int = 2,
        base_prices: Optional[List[int]] = None,
        players_per_team: int = 1,
        credits: int = 1000,
        increment: int = 50,
        start: bool = True
    ) -> Tuple[AuctionDTO, List[TeamDTO], List[PlayerDTO]]:
        base_prices = [100, 100] if base_prices is None else base_prices
        auction = await service.create_auction(OWNER_ID, auction_input(
            auction_type=auction_type,
            players_per_team=players_per_team,
            total_credits_per_team=credits,
            min_bid_increment=increment
        ))
        teams = []
        for i in range(team_count):
            teams.append(await service.add_team(auction.id, AddTeamInput(name=f"Team {i + 1}")))
        players = []
        for i, price in enumerate(base_prices):
            players.append(await service.add_player(
                auction.id, AddPlayerInput(name=f"Player {i + 1}", base_price=price)
            ))
        if start:
            auction = await service.start_auction(auction.id)
        else:
            auction = await service.get_auction(auction.id)
        return auction, teams, players

    return _setup
