"""
Live Auction Engine - Hexagonal Architecture Implementation

Runs live sports-player auctions where several teams spend a fixed credit
budget to build rosters. Supports open bidding (playerBid) and turn-based
drafting (teamBid, numberWise) on top of a shared real-time store.
"""

from .application.auction_service import AuctionSessionService
from .application.mirror import AuctionMirror
from .infrastructure.container import AuctionContainer, initialize_container

__all__ = [
    "AuctionSessionService",
    "AuctionMirror",
    "AuctionContainer",
    "initialize_container"
]
