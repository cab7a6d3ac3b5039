"""
Auction Session Service

Main application service that coordinates auction operations.
Acts as the facade for every auction use case: setup before the auction,
the live session intents, lifecycle transitions and change subscriptions.

Live intents follow the same path:
read snapshot -> allocation engine builds a delta -> one conditional
multi-path write -> DTO of the new state back to the caller.
"""

import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..domain.entities.auction import Auction
from ..domain.entities.auction_status import AuctionStatus, AuctionType, SportType
from ..domain.exceptions import (
    AuctionCompletedError,
    AuctionNotFoundError,
    AuctionNotLiveError,
    ConcurrentUpdateError,
    ExternalStoreError,
    InvalidStatusTransitionError,
    PreconditionFailedError,
    ValidationError,
)
from ..domain.services.allocation_engine import AllocationDelta, AllocationEngine
from ..domain.services.roster_service import RosterService
from ..domain.services.validation_service import ValidationService
from ..utils.constants import REFERRAL_CODE_MAX_ATTEMPTS, REFERRAL_VALID_DAYS
from ..utils.helpers import (
    generate_referral_code,
    is_referral_code_valid,
    normalize_referral_code,
    now_ms,
)
from .dto import (
    AddPlayerInput,
    AddTeamInput,
    AuctionDTO,
    AuctionSummary,
    BidResult,
    CreateAuctionInput,
    OwnerIdentity,
    PlayerDTO,
    ResolutionResult,
    TeamDTO,
    TeamStanding,
)
from .interfaces import IAuctionStore, IBlobStorage, IIdentityProvider, Unsubscribe

logger = logging.getLogger(__name__)

# Fields the owner may change before the auction goes live
_EDITABLE_FIELDS = {
    "auction_name": "auctionName",
    "venue": "venue",
    "auction_date": "auctionDate",
    "image_url": "imageUrl",
    "sport_type": "sportType",
    "auction_type": "auctionType",
    "players_per_team": "playersPerTeam",
    "min_bid_increment": "minBidIncrement",
    "total_credits_per_team": "totalCreditsPerTeam",
}


class AuctionSessionService:
    """
    Main application service for auction operations.

    Mutating intents for one auction are serialized through a per-auction
    lock inside this process; across processes every write carries
    preconditions so the store rejects anything computed from a stale read.
    """

    def __init__(
        self,
        store: IAuctionStore,
        identity_provider: IIdentityProvider,
        blob_storage: Optional[IBlobStorage] = None,
        free_team_limit: Optional[int] = None,
        referral_valid_days: int = REFERRAL_VALID_DAYS
    ):
        self._store = store
        self._identity_provider = identity_provider
        self._blob_storage = blob_storage
        self._referral_valid_days = referral_valid_days

        # Domain services
        self._engine = AllocationEngine()
        self._validation_service = ValidationService()
        self._roster_service = (
            RosterService(free_team_limit) if free_team_limit is not None else RosterService()
        )

        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    # ====================
    # Auction Setup
    # ====================

    async def create_auction(self, owner_id: str, auction_input: CreateAuctionInput) -> AuctionDTO:
        """Create a new auction in draft status"""
        now = now_ms()
        errors = self._validation_service.validate_auction_creation(
            auction_name=auction_input.auction_name,
            venue=auction_input.venue,
            auction_type=auction_input.auction_type,
            sport_type=auction_input.sport_type,
            total_credits_per_team=auction_input.total_credits_per_team,
            players_per_team=auction_input.players_per_team,
            min_bid_increment=auction_input.min_bid_increment,
            auction_date=auction_input.auction_date,
            now=now
        )
        if errors:
            raise ValidationError(errors)

        owner = await self._get_owner(owner_id)
        referral_code = await self._unique_referral_code()

        auction = self._roster_service.new_auction(
            auction_id="",
            owner_id=owner.owner_id,
            owner_name=owner.owner_name,
            referral_code=referral_code,
            auction_name=auction_input.auction_name,
            auction_type=auction_input.auction_type,
            sport_type=auction_input.sport_type,
            total_credits_per_team=auction_input.total_credits_per_team,
            players_per_team=auction_input.players_per_team,
            min_bid_increment=auction_input.min_bid_increment,
            auction_date=auction_input.auction_date,
            venue=auction_input.venue,
            now=now,
            image_url=auction_input.image_url
        )

        data = auction.to_dict()
        auction.id = await self._store.create(data)
        logger.info(f"Created auction {auction.id} ({auction.auction_type.value}) for owner {owner.owner_id}")
        return AuctionDTO.from_domain(auction)

    async def get_auction(self, auction_id: str) -> Optional[AuctionDTO]:
        """Get auction by ID"""
        data = await self._store.read(auction_id)
        if data is None:
            return None
        return AuctionDTO.from_domain(Auction.from_dict(data))

    async def get_auctions_by_owner(self, owner_id: str) -> List[AuctionDTO]:
        """Get an owner's auctions, newest first"""
        rows = await self._store.query("ownerId", owner_id)
        auctions = [Auction.from_dict(row) for row in rows]
        auctions.sort(key=lambda a: a.created_at, reverse=True)
        return [AuctionDTO.from_domain(a) for a in auctions]

    async def get_auction_by_referral_code(self, referral_code: str) -> Optional[AuctionDTO]:
        """Look an auction up by its public code; expired codes resolve to nothing"""
        code = normalize_referral_code(referral_code)
        if not code:
            return None

        rows = await self._store.query("referralCode", code)
        if not rows:
            return None

        auction = Auction.from_dict(rows[-1])
        if not is_referral_code_valid(auction.auction_date, valid_days=self._referral_valid_days):
            logger.info(f"Referral code {code} for auction {auction.id} has expired")
            return None
        return AuctionDTO.from_domain(auction)

    async def update_auction(self, auction_id: str, **changes: Any) -> AuctionDTO:
        """Change an auction's configuration before it goes live"""
        unknown = set(changes) - set(_EDITABLE_FIELDS)
        if unknown:
            raise ValidationError([f"Field {name} cannot be updated" for name in sorted(unknown)])

        async with self._locks[auction_id]:
            auction = await self._load(auction_id)
            if not auction.status.is_editable:
                raise InvalidStatusTransitionError(
                    f"Cannot edit a {auction.status.value} auction", auction
                )

            errors = self._validation_service.validate_configuration(
                changes.get("total_credits_per_team"),
                changes.get("players_per_team"),
                changes.get("min_bid_increment")
            )
            if "total_credits_per_team" in changes and auction.teams:
                errors.append("Credits per team can't change once teams exist")
            if "auction_name" in changes and not str(changes["auction_name"]).strip():
                errors.append("Please enter auction name")
            if "auction_type" in changes and changes["auction_type"] not in [t.value for t in AuctionType]:
                errors.append(f"Unknown auction type: {changes['auction_type']}")
            if "sport_type" in changes and changes["sport_type"] not in [s.value for s in SportType]:
                errors.append(f"Unknown sport type: {changes['sport_type']}")
            if "auction_date" in changes and changes["auction_date"] <= now_ms():
                errors.append("Auction date must be in the future")
            if errors:
                raise ValidationError(errors)

            updates = {_EDITABLE_FIELDS[name]: value for name, value in changes.items()}
            return await self._commit(auction, updates, expected={"status": auction.status.value})

    async def delete_auction(self, auction_id: str) -> None:
        """Delete an auction that isn't running"""
        async with self._locks[auction_id]:
            auction = await self._load(auction_id)
            if auction.is_live:
                raise InvalidStatusTransitionError("Cannot delete a live auction", auction)
            await self._store.delete(auction_id)
            logger.info(f"Deleted auction {auction_id}")
        self._locks.pop(auction_id, None)

    async def schedule_auction(self, auction_id: str) -> AuctionDTO:
        """Move a draft auction to scheduled"""
        async with self._locks[auction_id]:
            auction = await self._load(auction_id)
            self._require_transition(auction, AuctionStatus.SCHEDULED)
            return await self._commit(
                auction,
                {"status": AuctionStatus.SCHEDULED.value},
                expected={"status": auction.status.value}
            )

    async def add_team(self, auction_id: str, team_input: AddTeamInput) -> TeamDTO:
        """Add a team with the auction's credit budget"""
        async with self._locks[auction_id]:
            auction = await self._load(auction_id)
            errors = self._validation_service.validate_team_input(
                auction, team_input.name, team_input.color
            )
            if errors:
                raise ValidationError(errors)

            owner = await self._get_owner(auction.owner_id)
            self._roster_service.check_team_limit(auction, owner.has_subscription)

            team = self._roster_service.new_team(
                auction,
                team_id=self._store.generate_id(),
                name=team_input.name,
                color=team_input.color,
                sponsor_name=team_input.sponsor_name,
                icon_url=team_input.icon_url
            )
            await self._commit(
                auction,
                {f"teams/{team.id}": team.to_dict()},
                expected={"status": auction.status.value}
            )
            logger.info(f"Added team {team.name} to auction {auction_id}")
            return TeamDTO.from_domain(team, auction.players_per_team)

    async def add_player(self, auction_id: str, player_input: AddPlayerInput) -> PlayerDTO:
        """Add a player at the end of the presentation order"""
        async with self._locks[auction_id]:
            auction = await self._load(auction_id)
            errors = self._validation_service.validate_player_input(
                auction, player_input.name, player_input.base_price
            )
            if errors:
                raise ValidationError(errors)

            player = self._roster_service.new_player(
                auction,
                player_id=self._store.generate_id(),
                name=player_input.name,
                base_price=player_input.base_price,
                position=player_input.position,
                image_url=player_input.image_url
            )
            await self._commit(
                auction,
                {f"players/{player.id}": player.to_dict()},
                expected={"status": auction.status.value}
            )
            logger.info(f"Added player {player.name} to auction {auction_id}")
            return PlayerDTO.from_domain(player)

    async def upload_image(self, data: bytes, path: str, content_type: str = "image/jpeg") -> str:
        """Store an image and return its URL for imageUrl/iconUrl fields"""
        if self._blob_storage is None:
            raise ValidationError("Image storage is not configured")
        if not data:
            raise ValidationError("Invalid image data")
        return await self._blob_storage.upload(data, path, content_type)

    # ====================
    # Lifecycle
    # ====================

    async def start_auction(self, auction_id: str) -> AuctionDTO:
        """Go live; calling it on a live auction is a no-op"""
        async with self._locks[auction_id]:
            auction = await self._load(auction_id)

            if auction.is_completed:
                raise AuctionCompletedError(f"Auction {auction_id} is already completed", auction)
            if auction.is_live:
                logger.debug(f"Auction {auction_id} is already live")
                return AuctionDTO.from_domain(auction)

            errors = self._validation_service.validate_start(auction)
            if errors:
                raise ValidationError(errors)
            self._require_transition(auction, AuctionStatus.LIVE)

            dto = await self._commit(
                auction,
                {
                    "status": AuctionStatus.LIVE.value,
                    "currentAuction/isActive": True,
                    "currentAuction/startedAt": now_ms(),
                },
                expected={"status": auction.status.value}
            )
            logger.info(
                f"Auction {auction_id} is live: {auction.team_count} teams, "
                f"{auction.player_count} players"
            )
            return dto

    async def complete_auction(self, auction_id: str) -> AuctionDTO:
        """End the live session for good"""
        async with self._locks[auction_id]:
            auction = await self._load(auction_id)

            if auction.is_completed:
                raise AuctionCompletedError(f"Auction {auction_id} is already completed", auction)
            if not auction.is_live:
                raise AuctionNotLiveError(f"Auction {auction_id} is {auction.status.value}, not live", auction)

            dto = await self._commit(
                auction,
                {
                    "status": AuctionStatus.COMPLETED.value,
                    "currentAuction/isActive": False,
                    "currentAuction/completedAt": now_ms(),
                },
                expected={"status": AuctionStatus.LIVE.value}
            )
            logger.info(f"Auction {auction_id} completed")
        # Completed auctions take no further writes
        self._locks.pop(auction_id, None)
        return dto

    # ====================
    # Live Session
    # ====================

    async def place_bid(
        self,
        auction_id: str,
        team_id: str,
        player_id: str,
        proposed_amount: Optional[int] = None
    ) -> BidResult:
        """Raise the bid on the current player for a team"""
        async with self._locks[auction_id]:
            auction = await self._load(auction_id)
            delta = self._engine.place_bid(auction, team_id, player_id, proposed_amount)
            dto = await self._commit_delta(auction, delta)

        result = BidResult(
            success=True,
            accepted_amount=delta.amount,
            proposed_amount=proposed_amount,
            team_id=team_id,
            player_id=player_id,
            auction=dto
        )
        if result.resynced:
            result.message = (
                f"Bid adjusted from {proposed_amount} to {delta.amount} to match the current auction state"
            )
            logger.info(f"Auction {auction_id}: {result.message}")
        return result

    async def mark_sold(
        self,
        auction_id: str,
        player_id: str,
        team_id: str,
        final_price: int
    ) -> ResolutionResult:
        """Sell a player to a team at the final price"""
        async with self._locks[auction_id]:
            auction = await self._load(auction_id)
            delta = self._engine.mark_sold(auction, player_id, team_id, final_price)
            dto = await self._commit_delta(auction, delta)
        return self._resolution(delta, dto)

    async def sell_to_highest_bidder(self, auction_id: str) -> ResolutionResult:
        """Sell the current player to whoever holds the bid"""
        async with self._locks[auction_id]:
            auction = await self._load(auction_id)
            delta = self._engine.sell_to_highest_bidder(auction)
            dto = await self._commit_delta(auction, delta)
        return self._resolution(delta, dto)

    async def mark_unsold(self, auction_id: str, player_id: str) -> ResolutionResult:
        """Pass on a player"""
        async with self._locks[auction_id]:
            auction = await self._load(auction_id)
            delta = self._engine.mark_unsold(auction, player_id)
            dto = await self._commit_delta(auction, delta)
        return self._resolution(delta, dto)

    async def select_player(self, auction_id: str, team_id: str, player_id: str) -> ResolutionResult:
        """The team on turn takes a player (teamBid and numberWise)"""
        async with self._locks[auction_id]:
            auction = await self._load(auction_id)
            delta = self._engine.select_player(auction, team_id, player_id)
            dto = await self._commit_delta(auction, delta)
        return self._resolution(delta, dto)

    async def skip_turn(self, auction_id: str) -> ResolutionResult:
        """Move the turn past a team whose roster is full"""
        async with self._locks[auction_id]:
            auction = await self._load(auction_id)
            delta = self._engine.skip_turn(auction)
            dto = await self._commit_delta(auction, delta)
        return self._resolution(delta, dto)

    # ====================
    # Queries
    # ====================

    async def get_auction_summary(self, auction_id: str) -> AuctionSummary:
        """Standings and player outcomes for an auction"""
        auction = await self._load(auction_id)
        dto = AuctionDTO.from_domain(auction)

        standings = []
        for team in auction.ordered_teams():
            standings.append(TeamStanding(
                team_id=team.id,
                name=team.name,
                color=team.color,
                total_credits=team.total_credits,
                remaining_credits=team.remaining_credits,
                spent_credits=team.spent_credits,
                player_names=[
                    auction.players[pid].name for pid in team.players if pid in auction.players
                ]
            ))

        return AuctionSummary(
            auction_id=auction.id,
            auction_name=auction.auction_name,
            status=auction.status.value,
            standings=standings,
            sold_players=dto.players_with_status("sold"),
            unsold_players=dto.players_with_status("unsold"),
            available_players=dto.players_with_status("available"),
            total_spent=auction.spent_credits,
            credits_balanced=auction.credits_balanced,
            is_terminal=dto.is_terminal,
            issues=auction.validate_state()
        )

    async def on_auction_change(
        self,
        auction_id: str,
        callback: Callable[[AuctionDTO], Any]
    ) -> Unsubscribe:
        """
        Deliver a full AuctionDTO on every change of the auction.

        Every delivery replaces whatever the consumer held before; deliveries
        may repeat and may interleave with the consumer's own writes.
        """
        async def deliver(data: Dict[str, Any]) -> None:
            try:
                dto = AuctionDTO.from_domain(Auction.from_dict(data))
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping malformed snapshot of auction {auction_id}: {e}")
                return
            outcome = callback(dto)
            if inspect.isawaitable(outcome):
                await outcome

        return await self._store.subscribe(auction_id, deliver)

    # ====================
    # Internals
    # ====================

    async def _load(self, auction_id: str) -> Auction:
        data = await self._store.read(auction_id)
        if data is None:
            raise AuctionNotFoundError(f"Auction {auction_id} not found")
        return Auction.from_dict(data)

    async def _get_owner(self, owner_id: str) -> OwnerIdentity:
        owner = await self._identity_provider.get_user(owner_id)
        if owner is None:
            raise ValidationError(f"Unknown user {owner_id}")
        return owner

    async def _unique_referral_code(self) -> str:
        for _ in range(REFERRAL_CODE_MAX_ATTEMPTS):
            code = generate_referral_code()
            if not await self._store.query("referralCode", code):
                return code
            logger.warning(f"Referral code collision on {code}, regenerating")
        raise ExternalStoreError("Could not generate a unique referral code")

    def _require_transition(self, auction: Auction, target: AuctionStatus) -> None:
        if not auction.status.can_transition_to(target):
            raise InvalidStatusTransitionError(
                f"Cannot transition from {auction.status.value} to {target.value}",
                auction
            )

    async def _commit_delta(self, auction: Auction, delta: AllocationDelta) -> AuctionDTO:
        dto = await self._commit(auction, delta.updates, delta.expected)
        logger.info(
            f"Auction {auction.id}: {delta.action} player={delta.player_id} "
            f"team={delta.team_id} amount={delta.amount}"
        )
        return dto

    async def _commit(
        self,
        auction: Auction,
        updates: Mapping[str, Any],
        expected: Optional[Mapping[str, Any]] = None
    ) -> AuctionDTO:
        """Write one atomic multi-path update and return the resulting state"""
        updates = dict(updates)
        updates["updatedAt"] = now_ms()
        try:
            await self._store.update(auction.id, updates, expected=expected)
        except PreconditionFailedError as e:
            fresh = await self._load(auction.id)
            logger.info(f"Auction {auction.id} changed concurrently at {e.path}; rejecting stale write")
            raise ConcurrentUpdateError(
                "The auction changed while your request was in flight; retry with the current state",
                fresh
            ) from e
        except ExternalStoreError as e:
            logger.error(f"Failed to write auction {auction.id}: {e}", exc_info=True)
            raise

        delta = AllocationDelta(action="write", updates=updates)
        return AuctionDTO.from_domain(delta.apply_to(auction))

    def _resolution(self, delta: AllocationDelta, dto: AuctionDTO) -> ResolutionResult:
        return ResolutionResult(
            success=True,
            action=delta.action,
            auction=dto,
            player_id=delta.player_id,
            team_id=delta.team_id,
            final_price=delta.amount
        )
