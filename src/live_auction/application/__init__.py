"""
Application Layer

Coordinates between domain and infrastructure layers.
Contains use cases, application services, and ports (interfaces).
"""

from .auction_service import AuctionSessionService
from .dto import (
    AddPlayerInput,
    AddTeamInput,
    AuctionDTO,
    AuctionSummary,
    BidResult,
    CreateAuctionInput,
    OwnerIdentity,
    ResolutionResult,
)
from .mirror import AuctionMirror

__all__ = [
    "AuctionSessionService",
    "AuctionMirror",
    "AddPlayerInput",
    "AddTeamInput",
    "AuctionDTO",
    "AuctionSummary",
    "BidResult",
    "CreateAuctionInput",
    "OwnerIdentity",
    "ResolutionResult"
]
