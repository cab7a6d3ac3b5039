"""
Application Layer Interfaces (Ports)

Defines contracts between the application layer and infrastructure adapters.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from .dto import OwnerIdentity

JsonDict = Dict[str, Any]
SnapshotCallback = Callable[[JsonDict], Any]
Unsubscribe = Callable[[], Awaitable[None]]


# Persistence
class IAuctionStore(ABC):
    """
    Tree-structured document store holding one subtree per auction.

    Paths passed to ``update`` are relative to ``auctions/{auction_id}``.
    """

    @abstractmethod
    def generate_id(self) -> str:
        """Generate a unique key for a new child node"""
        pass

    @abstractmethod
    async def create(self, data: JsonDict) -> str:
        """Insert a new auction, stamping ``data['id']``; returns the generated id"""
        pass

    @abstractmethod
    async def read(self, auction_id: str) -> Optional[JsonDict]:
        """Read the full auction subtree, None if it doesn't exist"""
        pass

    @abstractmethod
    async def update(
        self,
        auction_id: str,
        updates: Mapping[str, Any],
        expected: Optional[Mapping[str, Any]] = None
    ) -> None:
        """
        Apply a multi-path update as one unit.

        When ``expected`` is given every path must currently hold the expected
        value, otherwise nothing is written and PreconditionFailedError is
        raised.
        """
        pass

    @abstractmethod
    async def delete(self, auction_id: str) -> None:
        """Remove an auction subtree"""
        pass

    @abstractmethod
    async def query(self, field: str, value: Any) -> List[JsonDict]:
        """Find auctions whose indexed top-level ``field`` equals ``value``"""
        pass

    @abstractmethod
    async def subscribe(self, auction_id: str, callback: SnapshotCallback) -> Unsubscribe:
        """
        Push full snapshots of an auction to ``callback`` on every change.

        Returns a coroutine function that stops the subscription.
        """
        pass

    async def close(self) -> None:
        """Release connections held by the adapter"""
        pass


# External Service Interfaces
class IBlobStorage(ABC):
    """Image storage for team icons, player photos and auction banners"""

    @abstractmethod
    async def upload(self, data: bytes, path: str, content_type: str = "image/jpeg") -> str:
        """Store ``data`` at ``path`` and return a public URL"""
        pass


class IIdentityProvider(ABC):
    """Supplies owner identity and the subscription gate"""

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[OwnerIdentity]:
        """Get identity for a user id"""
        pass
