"""
Infrastructure Layer

Adapters that connect the application layer to external systems:
the real-time store, image storage, identity and configuration.
"""

from .blob_storage import MemoryBlobStorage, S3BlobStorage
from .config import AuctionSettings, load_settings
from .container import AuctionContainer, cleanup_container, get_container, initialize_container
from .firebase_adapter import FirebaseAuctionStore
from .identity_adapter import StaticIdentityProvider
from .storage_adapter import MemoryAuctionStore

__all__ = [
    "AuctionContainer",
    "AuctionSettings",
    "FirebaseAuctionStore",
    "MemoryAuctionStore",
    "MemoryBlobStorage",
    "S3BlobStorage",
    "StaticIdentityProvider",
    "cleanup_container",
    "get_container",
    "initialize_container",
    "load_settings"
]
