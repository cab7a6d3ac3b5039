"""
Data Transfer Objects

Simple data containers for transferring data between layers.
Snapshots handed to subscribers and results of live intents are DTOs so the
UI and notification layers never touch the domain entities directly.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..domain.entities.auction import Auction
from ..domain.services.turn_scheduler import flow_for


# Inputs

@dataclass
class CreateAuctionInput:
    auction_name: str
    sport_type: str
    auction_type: str
    total_credits_per_team: int
    players_per_team: int
    min_bid_increment: int
    auction_date: int  # epoch ms
    venue: str
    image_url: Optional[str] = None


@dataclass
class AddTeamInput:
    name: str
    color: Optional[str] = None
    sponsor_name: Optional[str] = None
    icon_url: Optional[str] = None


@dataclass
class AddPlayerInput:
    name: str
    base_price: int = 0
    position: Optional[str] = None
    image_url: Optional[str] = None


@dataclass
class OwnerIdentity:
    """Identity collaborator's view of a user"""
    owner_id: str
    owner_name: str
    has_subscription: bool = False


# Snapshots

@dataclass
class PlayerDTO:
    """Player data for UI display"""
    id: str
    name: str
    base_price: int
    status: str
    order: int
    assigned_to_team: Optional[str] = None
    final_price: int = 0
    position: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def from_domain(cls, player) -> "PlayerDTO":
        """Convert from domain Player entity"""
        return cls(
            id=player.id,
            name=player.name,
            base_price=player.base_price,
            status=player.status.value,
            order=player.order,
            assigned_to_team=player.assigned_to_team,
            final_price=player.final_price,
            position=player.position,
            image_url=player.image_url
        )


@dataclass
class TeamDTO:
    """Team data for UI display"""
    id: str
    name: str
    color: str
    total_credits: int
    remaining_credits: int
    order: int
    player_ids: List[str]
    players_per_team: int
    sponsor_name: Optional[str] = None
    icon_url: Optional[str] = None

    @property
    def spent_credits(self) -> int:
        return self.total_credits - self.remaining_credits

    @property
    def player_count(self) -> int:
        return len(self.player_ids)

    @property
    def is_full(self) -> bool:
        return len(self.player_ids) >= self.players_per_team

    @property
    def players_needed(self) -> int:
        return max(0, self.players_per_team - len(self.player_ids))

    @classmethod
    def from_domain(cls, team, players_per_team: int) -> "TeamDTO":
        return cls(
            id=team.id,
            name=team.name,
            color=team.color,
            total_credits=team.total_credits,
            remaining_credits=team.remaining_credits,
            order=team.order,
            player_ids=list(team.players),
            players_per_team=players_per_team,
            sponsor_name=team.sponsor_name,
            icon_url=team.icon_url
        )


@dataclass
class AuctionDTO:
    """Complete auction data for UI display"""
    # Core identification
    id: str
    owner_id: str
    owner_name: str
    auction_name: str
    referral_code: str

    # Configuration
    auction_type: str
    sport_type: str
    total_credits_per_team: int
    players_per_team: int
    min_bid_increment: int
    auction_date: int
    venue: str
    image_url: Optional[str]
    status: str

    # Participants, in presentation order
    teams: List[TeamDTO]
    players: List[PlayerDTO]

    # Live state
    current_player_index: int
    current_team_index: int
    current_bidding_team: Optional[str]
    current_bid_amount: int
    is_active: bool
    started_at: Optional[int]
    completed_at: Optional[int]

    # Derived turn information
    current_player_id: Optional[str]
    current_team_id: Optional[str]
    next_bid_amount: Optional[int]
    is_terminal: bool

    # Metadata
    created_at: int
    updated_at: int

    def get_team(self, team_id: str) -> Optional[TeamDTO]:
        return next((t for t in self.teams if t.id == team_id), None)

    def get_player(self, player_id: str) -> Optional[PlayerDTO]:
        return next((p for p in self.players if p.id == player_id), None)

    def players_with_status(self, status: str) -> List[PlayerDTO]:
        return [p for p in self.players if p.status == status]

    @classmethod
    def from_domain(cls, auction: Auction) -> "AuctionDTO":
        """Convert from domain Auction entity"""
        flow = flow_for(auction.auction_type)
        current_player = flow.current_player(auction)
        current_team = flow.current_team(auction)
        state = auction.current_auction

        next_bid = None
        if current_player is not None:
            next_bid = (
                current_player.base_price if state.current_bid_amount == 0
                else state.current_bid_amount + auction.min_bid_increment
            )

        return cls(
            id=auction.id,
            owner_id=auction.owner_id,
            owner_name=auction.owner_name,
            auction_name=auction.auction_name,
            referral_code=auction.referral_code,
            auction_type=auction.auction_type.value,
            sport_type=auction.sport_type.value,
            total_credits_per_team=auction.total_credits_per_team,
            players_per_team=auction.players_per_team,
            min_bid_increment=auction.min_bid_increment,
            auction_date=auction.auction_date,
            venue=auction.venue,
            image_url=auction.image_url,
            status=auction.status.value,
            teams=[TeamDTO.from_domain(t, auction.players_per_team) for t in auction.ordered_teams()],
            players=[PlayerDTO.from_domain(p) for p in auction.ordered_players()],
            current_player_index=state.current_player_index,
            current_team_index=state.current_team_index,
            current_bidding_team=state.current_bidding_team,
            current_bid_amount=state.current_bid_amount,
            is_active=state.is_active,
            started_at=state.started_at,
            completed_at=state.completed_at,
            current_player_id=current_player.id if current_player else None,
            current_team_id=current_team.id if current_team else None,
            next_bid_amount=next_bid,
            is_terminal=flow.is_terminal(auction),
            created_at=auction.created_at,
            updated_at=auction.updated_at
        )


# Result DTOs for operation outcomes

@dataclass
class BidResult:
    """Result of placing a bid"""
    success: bool
    accepted_amount: int
    proposed_amount: Optional[int]
    team_id: str
    player_id: str
    auction: AuctionDTO
    message: Optional[str] = None

    @property
    def resynced(self) -> bool:
        """True when the caller proposed a stale amount and was corrected"""
        return self.proposed_amount is not None and self.proposed_amount != self.accepted_amount


@dataclass
class ResolutionResult:
    """Result of a sold, unsold, select or skip intent"""
    success: bool
    action: str
    auction: AuctionDTO
    player_id: Optional[str] = None
    team_id: Optional[str] = None
    final_price: int = 0
    message: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.auction.is_terminal


@dataclass
class TeamStanding:
    team_id: str
    name: str
    color: str
    total_credits: int
    remaining_credits: int
    spent_credits: int
    player_names: List[str]


@dataclass
class AuctionSummary:
    """Results overview of an auction"""
    auction_id: str
    auction_name: str
    status: str
    standings: List[TeamStanding]
    sold_players: List[PlayerDTO]
    unsold_players: List[PlayerDTO]
    available_players: List[PlayerDTO]
    total_spent: int
    credits_balanced: bool
    is_terminal: bool
    issues: List[str] = field(default_factory=list)
