"""Catalog domain - songs, categories and their uploaded assets.

Provides the repositories the admin panel works through, the document and
asset store backends they sit on, and the asset lifecycle policy.
"""

from .exceptions import (
    AssetCleanupError,
    AssetNotFoundError,
    AssetStoreError,
    CatalogError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from .models import (
    CATEGORIES_COLLECTION,
    SONGS_COLLECTION,
    AssetUpload,
    Category,
    CategoryUpdate,
    Song,
    SongDraft,
    SongUpdate,
)
from .documents import DocumentStore, InMemoryDocumentStore, SqlDocumentStore
from .assets import (
    AssetSlot,
    AssetStore,
    InMemoryAssetStore,
    LocalAssetStore,
    build_asset_key,
    validate_upload,
)
from .lifecycle import AssetJanitor, CleanupAttempt, SlotAction, SlotChange
from .categories import CategoryRepository
from .songs import SongRepository
from .stats import CatalogStats, catalog_stats

__all__ = [
    "AssetCleanupError",
    "AssetNotFoundError",
    "AssetStoreError",
    "CatalogError",
    "NotFoundError",
    "TransportError",
    "ValidationError",
    "CATEGORIES_COLLECTION",
    "SONGS_COLLECTION",
    "AssetUpload",
    "Category",
    "CategoryUpdate",
    "Song",
    "SongDraft",
    "SongUpdate",
    "DocumentStore",
    "InMemoryDocumentStore",
    "SqlDocumentStore",
    "AssetSlot",
    "AssetStore",
    "InMemoryAssetStore",
    "LocalAssetStore",
    "build_asset_key",
    "validate_upload",
    "AssetJanitor",
    "CleanupAttempt",
    "SlotAction",
    "SlotChange",
    "CategoryRepository",
    "SongRepository",
    "CatalogStats",
    "catalog_stats",
]
