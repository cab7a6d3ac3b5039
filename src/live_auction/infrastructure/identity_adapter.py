"""
Identity Adapter

Identity provider for deployments where one configured operator owns every
auction this process creates.
"""

from typing import Optional

from ..application.dto import OwnerIdentity
from ..application.interfaces import IIdentityProvider


class StaticIdentityProvider(IIdentityProvider):
    """Resolves only the configured owner"""

    def __init__(self, owner_id: str, owner_name: str, has_subscription: bool = False):
        self._owner = OwnerIdentity(
            owner_id=owner_id,
            owner_name=owner_name,
            has_subscription=has_subscription
        )

    async def get_user(self, user_id: str) -> Optional[OwnerIdentity]:
        if user_id != self._owner.owner_id:
            return None
        return self._owner
