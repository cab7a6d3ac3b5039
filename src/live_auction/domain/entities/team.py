"""
Team Entity

Represents a bidding team with its credit budget and roster.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .auction_status import TeamStatus


@dataclass
class Team:
    """Represents a team in the auction"""
    id: str
    name: str
    color: str
    total_credits: int
    remaining_credits: Optional[int] = None
    order: int = 0
    sponsor_name: Optional[str] = None
    icon_url: Optional[str] = None
    status: TeamStatus = TeamStatus.AVAILABLE
    final_price: int = 0
    players: List[str] = field(default_factory=list)  # player ids, in purchase order

    def __post_init__(self):
        """New teams start with their whole budget"""
        if self.remaining_credits is None:
            self.remaining_credits = self.total_credits
        if self.total_credits < 0:
            raise ValueError("Total credits cannot be negative")

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def spent_credits(self) -> int:
        return self.total_credits - self.remaining_credits

    def is_full(self, players_per_team: int) -> bool:
        """Check if team holds its full roster"""
        return self.player_count >= players_per_team

    def needs_players(self, players_per_team: int) -> int:
        """Get number of players still needed"""
        return max(0, players_per_team - self.player_count)

    def can_afford(self, amount: int) -> bool:
        return self.remaining_credits >= amount

    def contains_player(self, player_id: str) -> bool:
        return player_id in self.players

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "totalCredits": self.total_credits,
            "remainingCredits": self.remaining_credits,
            "status": self.status.value,
            "finalPrice": self.final_price,
            "players": list(self.players),
            "order": self.order,
        }
        if self.sponsor_name is not None:
            data["sponsorName"] = self.sponsor_name
        if self.icon_url is not None:
            data["iconUrl"] = self.icon_url
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Team":
        # The store drops empty lists, so a team without players has no key
        players = data.get("players") or []
        if isinstance(players, dict):
            players = [players[key] for key in sorted(players, key=int)]
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            color=data.get("color", ""),
            total_credits=int(data.get("totalCredits", 0)),
            remaining_credits=int(data.get("remainingCredits", data.get("totalCredits", 0))),
            order=int(data.get("order", 0)),
            sponsor_name=data.get("sponsorName"),
            icon_url=data.get("iconUrl"),
            status=TeamStatus(data.get("status", TeamStatus.AVAILABLE.value)),
            final_price=int(data.get("finalPrice", 0)),
            players=list(players),
        )
