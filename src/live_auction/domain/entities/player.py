"""
Player Entity

Represents a player put up for auction.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .auction_status import PlayerStatus


@dataclass
class Player:
    """Represents a player in the auction"""
    id: str
    name: str
    base_price: int = 0
    order: int = 0
    position: Optional[str] = None
    image_url: Optional[str] = None
    status: PlayerStatus = PlayerStatus.AVAILABLE
    assigned_to_team: Optional[str] = None
    final_price: int = 0

    def __post_init__(self):
        """Validate player data after initialization"""
        if self.base_price < 0:
            raise ValueError("Base price cannot be negative")

    @property
    def is_available(self) -> bool:
        return self.status == PlayerStatus.AVAILABLE

    @property
    def is_sold(self) -> bool:
        return self.status == PlayerStatus.SOLD

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "basePrice": self.base_price,
            "status": self.status.value,
            "assignedToTeam": self.assigned_to_team,
            "finalPrice": self.final_price,
            "order": self.order,
        }
        if self.position is not None:
            data["position"] = self.position
        if self.image_url is not None:
            data["imageUrl"] = self.image_url
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            base_price=int(data.get("basePrice", 0)),
            order=int(data.get("order", 0)),
            position=data.get("position"),
            image_url=data.get("imageUrl"),
            status=PlayerStatus(data.get("status", PlayerStatus.AVAILABLE.value)),
            assigned_to_team=data.get("assignedToTeam"),
            final_price=int(data.get("finalPrice", 0)),
        )
