"""
Auction Value Objects

Status lifecycle with transition logic, plus the other enumerations stored on
an auction. Enum values are the strings persisted in the store.
"""

from enum import Enum
from typing import List


class AuctionStatus(Enum):
    """Lifecycle of an auction"""
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    LIVE = "live"
    COMPLETED = "completed"

    @property
    def next_statuses(self) -> List["AuctionStatus"]:
        """Get valid next statuses from current status"""
        transitions = {
            AuctionStatus.DRAFT: [AuctionStatus.SCHEDULED, AuctionStatus.LIVE],
            AuctionStatus.SCHEDULED: [AuctionStatus.LIVE],
            AuctionStatus.LIVE: [AuctionStatus.COMPLETED],
            AuctionStatus.COMPLETED: []
        }
        return transitions.get(self, [])

    def can_transition_to(self, target_status: "AuctionStatus") -> bool:
        """Check if can transition to target status"""
        return target_status in self.next_statuses

    @property
    def is_editable(self) -> bool:
        """Teams and players can only be added before the auction goes live"""
        return self in [AuctionStatus.DRAFT, AuctionStatus.SCHEDULED]


class AuctionType(Enum):
    """Turn protocol used during the live session"""
    PLAYER_BID = "playerBid"
    TEAM_BID = "teamBid"
    NUMBER_WISE = "numberWise"

    @property
    def uses_bidding(self) -> bool:
        return self == AuctionType.PLAYER_BID

    @property
    def uses_team_turns(self) -> bool:
        return self in [AuctionType.TEAM_BID, AuctionType.NUMBER_WISE]


class SportType(Enum):
    CRICKET = "cricket"
    FOOTBALL = "football"
    BASKETBALL = "basketball"
    OTHER = "other"


class PlayerStatus(Enum):
    AVAILABLE = "available"
    SOLD = "sold"
    UNSOLD = "unsold"

    @property
    def is_resolved(self) -> bool:
        return self != PlayerStatus.AVAILABLE


class TeamStatus(Enum):
    AVAILABLE = "available"
    SOLD = "sold"
