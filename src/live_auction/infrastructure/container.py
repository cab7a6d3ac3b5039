"""
Dependency Injection Configuration

Central container that wires up all dependencies for the auction engine.
"""

import logging
from typing import Any, Dict, Optional

from ..application.auction_service import AuctionSessionService
from ..application.interfaces import IAuctionStore, IBlobStorage, IIdentityProvider
from .blob_storage import MemoryBlobStorage, S3BlobStorage
from .config import AuctionSettings
from .firebase_adapter import FirebaseAuctionStore
from .identity_adapter import StaticIdentityProvider
from .storage_adapter import MemoryAuctionStore

logger = logging.getLogger(__name__)


class AuctionContainer:
    """
    Dependency injection container for the auction engine.

    Builds adapters from settings; without settings everything runs in
    memory, which is what the tests use.
    """

    def __init__(self, settings: Optional[AuctionSettings] = None):
        self.settings = settings or AuctionSettings()
        self._services: Dict[str, Any] = {}
        self._setup_dependencies()

    def _setup_dependencies(self):
        """Setup all service dependencies"""
        settings = self.settings

        if settings.store_backend == "firebase":
            self._services['auction_store'] = FirebaseAuctionStore(
                settings.firebase_database_url,
                auth_token=settings.firebase_auth_token,
                timeout=settings.store_timeout,
                max_retries=settings.store_max_retries,
                retry_delay=settings.store_retry_delay
            )
        else:
            self._services['auction_store'] = MemoryAuctionStore()

        if settings.blob_bucket:
            self._services['blob_storage'] = S3BlobStorage(settings.blob_bucket, settings.aws_region)
        else:
            self._services['blob_storage'] = MemoryBlobStorage()

        self._services['identity_provider'] = StaticIdentityProvider(
            settings.owner_id,
            settings.owner_name,
            has_subscription=settings.owner_subscribed
        )
        logger.debug(f"Container configured with {settings.store_backend} store")

    def get_auction_service(self) -> AuctionSessionService:
        """Get configured auction session service"""
        if 'auction_service' not in self._services:
            self._services['auction_service'] = AuctionSessionService(
                store=self.get_auction_store(),
                identity_provider=self.get_identity_provider(),
                blob_storage=self.get_blob_storage(),
                free_team_limit=self.settings.free_team_limit,
                referral_valid_days=self.settings.referral_valid_days
            )
        return self._services['auction_service']

    def get_auction_store(self) -> IAuctionStore:
        """Get auction store"""
        return self._services['auction_store']

    def get_blob_storage(self) -> IBlobStorage:
        """Get blob storage"""
        return self._services['blob_storage']

    def get_identity_provider(self) -> IIdentityProvider:
        """Get identity provider"""
        return self._services['identity_provider']

    def set_identity_provider(self, provider: IIdentityProvider) -> None:
        """Swap the identity provider (tests, embedding applications)"""
        self._services['identity_provider'] = provider
        self._services.pop('auction_service', None)

    async def cleanup(self) -> None:
        """Cleanup resources"""
        store = self._services.get('auction_store')
        if store is not None:
            await store.close()
        self._services.clear()


# Global container instance
_container: Optional[AuctionContainer] = None


def get_container() -> AuctionContainer:
    """Get global container instance"""
    global _container
    if _container is None:
        _container = AuctionContainer()
    return _container


def initialize_container(settings: Optional[AuctionSettings] = None) -> AuctionContainer:
    """Initialize global container with settings"""
    global _container
    _container = AuctionContainer(settings)
    return _container


async def cleanup_container() -> None:
    """Cleanup global container"""
    global _container
    if _container:
        await _container.cleanup()
        _container = None
