"""
Mock Adapters for Testing

Mock implementations of interfaces for testing without external services.
"""

from typing import Dict, List, Optional

from ..application.dto import OwnerIdentity
from ..application.interfaces import IIdentityProvider


class MockIdentityProvider(IIdentityProvider):
    """Mock identity provider for testing"""

    def __init__(self):
        self.users: Dict[str, OwnerIdentity] = {}
        self.lookups: List[str] = []

    async def get_user(self, user_id: str) -> Optional[OwnerIdentity]:
        self.lookups.append(user_id)
        return self.users.get(user_id)

    def add_user(self, user_id: str, name: str, has_subscription: bool = False) -> OwnerIdentity:
        """Helper for testing"""
        user = OwnerIdentity(owner_id=user_id, owner_name=name, has_subscription=has_subscription)
        self.users[user_id] = user
        return user

    def set_subscription(self, user_id: str, has_subscription: bool) -> None:
        """Helper for testing"""
        self.users[user_id].has_subscription = has_subscription
