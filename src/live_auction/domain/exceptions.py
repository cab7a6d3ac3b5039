"""
Domain Exceptions

Business rule violations and auction-specific errors.

Four families, matching how callers are expected to react:
- ValidationError: malformed input, nothing was written
- StateConflictError: the request disagrees with the live state; carries the
  authoritative auction snapshot so the caller can resynchronize
- NotFoundError: unknown auction, team or player id
- ExternalStoreError: the store or blob collaborator failed; retryable
"""

from typing import Any, List, Optional


class AuctionError(Exception):
    """Base exception for all auction-related errors"""
    pass


# ====================
# Validation
# ====================

class ValidationError(AuctionError):
    """Raised when input or pre-start validation fails"""

    def __init__(self, errors: Any):
        if isinstance(errors, str):
            errors = [errors]
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors))


class TeamLimitReachedError(ValidationError):
    """Raised when a non-subscriber tries to add more teams than allowed"""
    pass


# ====================
# State conflicts
# ====================

class StateConflictError(AuctionError):
    """Raised when an operation conflicts with the current auction state"""

    def __init__(self, message: str, auction: Optional[Any] = None):
        super().__init__(message)
        self.auction = auction


class AuctionNotLiveError(StateConflictError):
    """Raised when a live-only operation runs on an auction that isn't live"""
    pass


class AuctionCompletedError(StateConflictError):
    """Raised when trying to mutate a completed auction"""
    pass


class InvalidStatusTransitionError(StateConflictError):
    """Raised when attempting an invalid status transition"""
    pass


class PlayerNotAvailableError(StateConflictError):
    """Raised when the player was already sold or marked unsold"""
    pass


class InsufficientCreditsError(StateConflictError):
    """Raised when a team cannot afford a bid or a sale"""
    pass


class InvalidAuctionTypeForOperationError(StateConflictError):
    """Raised when an operation does not apply to the auction's type"""
    pass


class NotCurrentPlayerError(StateConflictError):
    """Raised when operating on a player that isn't up for auction"""
    pass


class NotTeamsTurnError(StateConflictError):
    """Raised when a team acts outside its turn"""
    pass


class TeamFullError(StateConflictError):
    """Raised when a team already holds playersPerTeam players"""
    pass


class BidBelowBasePriceError(StateConflictError):
    """Raised when a sale price is lower than the player's base price"""
    pass


class DuplicateBidError(StateConflictError):
    """Raised when the leading team bids against itself"""
    pass


class ConcurrentUpdateError(StateConflictError):
    """Raised when another writer changed the auction first; retry with fresh state"""
    pass


# ====================
# Lookups
# ====================

class NotFoundError(AuctionError):
    """Raised when an auction, team or player id is unknown"""
    pass


class AuctionNotFoundError(NotFoundError):
    pass


class TeamNotFoundError(NotFoundError):
    pass


class PlayerNotFoundError(NotFoundError):
    pass


# ====================
# External collaborators
# ====================

class ExternalStoreError(AuctionError):
    """Raised when the persistence store fails (network, storage, timeout)"""
    retryable = True


class PreconditionFailedError(ExternalStoreError):
    """Raised by a store when a conditional update's precondition doesn't hold"""
    retryable = False

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class BlobStorageError(ExternalStoreError):
    """Raised when an image upload fails"""
    pass
