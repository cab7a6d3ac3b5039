"""
Domain Services

Business logic services that operate on domain entities.
"""

from .allocation_engine import AllocationDelta, AllocationEngine
from .roster_service import RosterService
from .turn_scheduler import AuctionFlow, NumberWiseFlow, PlayerBidFlow, TeamBidFlow, flow_for
from .validation_service import ValidationService

__all__ = [
    "AllocationDelta",
    "AllocationEngine",
    "RosterService",
    "AuctionFlow",
    "PlayerBidFlow",
    "TeamBidFlow",
    "NumberWiseFlow",
    "flow_for",
    "ValidationService"
]
