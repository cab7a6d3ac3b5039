"""
Auction Entity - Aggregate Root

Main entity representing a configured auction with its embedded teams,
players and live turn-pointer state. Mutation during the live session goes
through the allocation engine as multi-path deltas; this class only answers
questions about a snapshot.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .auction_status import AuctionStatus, AuctionType, PlayerStatus, SportType
from .player import Player
from .team import Team
from ..exceptions import PlayerNotFoundError, TeamNotFoundError


@dataclass
class CurrentAuctionState:
    """Turn pointers and the bid currently on the table"""
    current_player_index: int = 0
    current_team_index: int = 0
    current_bidding_team: Optional[str] = None
    current_bid_amount: int = 0
    is_active: bool = False
    started_at: Optional[int] = None
    completed_at: Optional[int] = None

    @property
    def has_bid(self) -> bool:
        return self.current_bidding_team is not None and self.current_bid_amount > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentPlayerIndex": self.current_player_index,
            "currentTeamIndex": self.current_team_index,
            "currentBiddingTeam": self.current_bidding_team,
            "currentBidAmount": self.current_bid_amount,
            "isActive": self.is_active,
            "startedAt": self.started_at,
            "completedAt": self.completed_at,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CurrentAuctionState":
        data = data or {}
        return cls(
            current_player_index=int(data.get("currentPlayerIndex", 0)),
            current_team_index=int(data.get("currentTeamIndex", 0)),
            current_bidding_team=data.get("currentBiddingTeam"),
            current_bid_amount=int(data.get("currentBidAmount", 0)),
            is_active=bool(data.get("isActive", False)),
            started_at=data.get("startedAt"),
            completed_at=data.get("completedAt"),
        )


@dataclass
class Auction:
    """
    Auction aggregate root.

    Teams and players are embedded maps keyed by their generated ids; the
    ``order`` field on each gives the presentation and rotation order.
    """

    # Core identification
    id: str
    owner_id: str
    owner_name: str
    auction_name: str
    referral_code: str

    # Configuration
    auction_type: AuctionType = AuctionType.PLAYER_BID
    sport_type: SportType = SportType.OTHER
    total_credits_per_team: int = 1000
    players_per_team: int = 11
    min_bid_increment: int = 10
    auction_date: int = 0  # epoch ms
    venue: str = ""
    image_url: Optional[str] = None

    # Participants
    teams: Dict[str, Team] = field(default_factory=dict)
    players: Dict[str, Player] = field(default_factory=dict)

    # Live state
    current_auction: CurrentAuctionState = field(default_factory=CurrentAuctionState)
    status: AuctionStatus = AuctionStatus.DRAFT

    # Metadata
    created_at: int = 0
    updated_at: int = 0

    # ===================
    # Status
    # ===================

    @property
    def is_live(self) -> bool:
        return self.status == AuctionStatus.LIVE

    @property
    def is_completed(self) -> bool:
        return self.status == AuctionStatus.COMPLETED

    # ===================
    # Participants
    # ===================

    @property
    def team_count(self) -> int:
        return len(self.teams)

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def required_players(self) -> int:
        """Players needed to fill every roster"""
        return self.team_count * self.players_per_team

    def get_team(self, team_id: str) -> Team:
        """Get a team by id or raise TeamNotFoundError"""
        team = self.teams.get(team_id)
        if team is None:
            raise TeamNotFoundError(f"Team {team_id} not found in auction {self.id}")
        return team

    def get_player(self, player_id: str) -> Player:
        """Get a player by id or raise PlayerNotFoundError"""
        player = self.players.get(player_id)
        if player is None:
            raise PlayerNotFoundError(f"Player {player_id} not found in auction {self.id}")
        return player

    def ordered_teams(self) -> List[Team]:
        return sorted(self.teams.values(), key=lambda t: t.order)

    def ordered_players(self) -> List[Player]:
        return sorted(self.players.values(), key=lambda p: p.order)

    def players_with_status(self, status: PlayerStatus) -> List[Player]:
        return [p for p in self.ordered_players() if p.status == status]

    def available_players(self) -> List[Player]:
        return self.players_with_status(PlayerStatus.AVAILABLE)

    def sold_players(self) -> List[Player]:
        return self.players_with_status(PlayerStatus.SOLD)

    def unsold_players(self) -> List[Player]:
        return self.players_with_status(PlayerStatus.UNSOLD)

    # ===================
    # Money
    # ===================

    @property
    def total_credits(self) -> int:
        return sum(team.total_credits for team in self.teams.values())

    @property
    def remaining_credits(self) -> int:
        return sum(team.remaining_credits for team in self.teams.values())

    @property
    def spent_credits(self) -> int:
        return sum(player.final_price for player in self.sold_players())

    @property
    def credits_balanced(self) -> bool:
        """Money conservation: remaining + spent equals what teams started with"""
        return self.remaining_credits + self.spent_credits == self.total_credits

    # ===================
    # Validation
    # ===================

    def validate_state(self) -> List[str]:
        """Validate current auction state and return any issues"""
        issues = []

        for team in self.teams.values():
            if team.remaining_credits < 0:
                issues.append(f"Team {team.name} has negative credits")

            spent = 0
            for player_id in team.players:
                player = self.players.get(player_id)
                if player is None:
                    issues.append(f"Team {team.name} lists unknown player {player_id}")
                    continue
                if player.assigned_to_team != team.id:
                    issues.append(f"Player {player.name} is on {team.name}'s roster but assigned elsewhere")
                spent += player.final_price

            if team.total_credits - spent != team.remaining_credits:
                issues.append(f"Team {team.name} credits don't add up")

        for player in self.players.values():
            if player.is_sold:
                if player.assigned_to_team is None:
                    issues.append(f"Sold player {player.name} has no team")
                elif not self.teams.get(player.assigned_to_team) or \
                        not self.teams[player.assigned_to_team].contains_player(player.id):
                    issues.append(f"Sold player {player.name} missing from team roster")
            elif player.assigned_to_team is not None:
                issues.append(f"Player {player.name} is assigned but not sold")

        if not self.credits_balanced:
            issues.append("Credits are not conserved")

        return issues

    # ===================
    # Serialization
    # ===================

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "ownerId": self.owner_id,
            "ownerName": self.owner_name,
            "auctionName": self.auction_name,
            "sportType": self.sport_type.value,
            "auctionType": self.auction_type.value,
            "totalCreditsPerTeam": self.total_credits_per_team,
            "playersPerTeam": self.players_per_team,
            "minBidIncrement": self.min_bid_increment,
            "auctionDate": self.auction_date,
            "venue": self.venue,
            "referralCode": self.referral_code,
            "players": {pid: p.to_dict() for pid, p in self.players.items()},
            "teams": {tid: t.to_dict() for tid, t in self.teams.items()},
            "currentAuction": self.current_auction.to_dict(),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "status": self.status.value,
        }
        if self.image_url is not None:
            data["imageUrl"] = self.image_url
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Auction":
        # Empty maps are never persisted by the store
        players = data.get("players") or {}
        teams = data.get("teams") or {}
        return cls(
            id=data["id"],
            owner_id=data.get("ownerId", ""),
            owner_name=data.get("ownerName", ""),
            auction_name=data.get("auctionName", ""),
            referral_code=data.get("referralCode", ""),
            auction_type=AuctionType(data.get("auctionType", AuctionType.PLAYER_BID.value)),
            sport_type=SportType(data.get("sportType", SportType.OTHER.value)),
            total_credits_per_team=int(data.get("totalCreditsPerTeam", 0)),
            players_per_team=int(data.get("playersPerTeam", 0)),
            min_bid_increment=int(data.get("minBidIncrement", 0)),
            auction_date=int(data.get("auctionDate", 0)),
            venue=data.get("venue", ""),
            image_url=data.get("imageUrl"),
            teams={tid: Team.from_dict(t) for tid, t in teams.items()},
            players={pid: Player.from_dict(p) for pid, p in players.items()},
            current_auction=CurrentAuctionState.from_dict(data.get("currentAuction")),
            status=AuctionStatus(data.get("status", AuctionStatus.DRAFT.value)),
            created_at=int(data.get("createdAt", 0)),
            updated_at=int(data.get("updatedAt", 0)),
        )
