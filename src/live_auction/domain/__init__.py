"""
Domain Layer - Pure Business Logic

Contains entities, value objects, domain services, and business rules.
No external dependencies allowed in this layer.
"""

from .entities import Auction, AuctionStatus, AuctionType, Player, PlayerStatus, Team
from .exceptions import AuctionError, NotFoundError, StateConflictError, ValidationError

__all__ = [
    "Auction",
    "AuctionStatus",
    "AuctionType",
    "Player",
    "PlayerStatus",
    "Team",
    "AuctionError",
    "NotFoundError",
    "StateConflictError",
    "ValidationError"
]
