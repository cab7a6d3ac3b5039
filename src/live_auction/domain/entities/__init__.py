"""
Domain Entities

Core business objects representing the auction system's main concepts.
"""

from .auction import Auction, CurrentAuctionState
from .auction_status import AuctionStatus, AuctionType, PlayerStatus, SportType, TeamStatus
from .player import Player
from .team import Team

__all__ = [
    "Auction",
    "CurrentAuctionState",
    "AuctionStatus",
    "AuctionType",
    "PlayerStatus",
    "SportType",
    "TeamStatus",
    "Player",
    "Team",
]
