"""Application context for explicit state passing.

Bundles the configured stores and services so the CLI and the web backend
build them in one place and hand them around explicitly, instead of reaching
for module-level globals.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from loguru import logger

from mezmurhub.core.config import Config, get_assets_root, get_database_path
from mezmurhub.core.database import init_database, make_connection_factory
from mezmurhub.domain.auth import (
    AuthService,
    InMemoryUserStore,
    Session,
    SqlUserStore,
)
from mezmurhub.domain.catalog import (
    AssetJanitor,
    AssetStore,
    CategoryRepository,
    DocumentStore,
    InMemoryAssetStore,
    InMemoryDocumentStore,
    LocalAssetStore,
    SongRepository,
    SqlDocumentStore,
)
from mezmurhub.domain.catalog.assets import MB


@dataclass
class AppContext:
    """Stores and services shared by every request or command.

    Attributes:
        config: Application configuration
        documents: Catalog Store holding songs and categories
        assets: Asset Store holding uploaded audio and images
        janitor: Cleanup log for best-effort asset removal
        auth: Account and session service
    """

    config: Config
    documents: DocumentStore
    assets: AssetStore
    janitor: AssetJanitor
    auth: AuthService

    @classmethod
    def create(cls, config: Config) -> "AppContext":
        """Build the context for the configured backend, initialising the schema.

        Args:
            config: Application configuration

        Returns:
            New AppContext backed by SQL / local files, or memory
        """
        if config.store.backend == "memory":
            return cls.in_memory(config)

        connect = make_connection_factory(
            db_path=get_database_path(config),
            database_url=config.store.database_url,
        )
        init_database(connect)
        assets = LocalAssetStore(
            get_assets_root(config), public_base_url=config.assets.public_base_url
        )
        auth = AuthService(
            SqlUserStore(connect),
            session_ttl=timedelta(hours=config.auth.session_ttl_hours),
        )
        logger.info(f"Using {config.store.backend} catalog store")
        return cls(
            config=config,
            documents=SqlDocumentStore(connect),
            assets=assets,
            janitor=AssetJanitor(assets),
            auth=auth,
        )

    @classmethod
    def in_memory(cls, config: Optional[Config] = None) -> "AppContext":
        """Context whose stores live only in this process."""
        config = config or Config()
        assets = InMemoryAssetStore(public_base_url=config.assets.public_base_url)
        return cls(
            config=config,
            documents=InMemoryDocumentStore(),
            assets=assets,
            janitor=AssetJanitor(assets),
            auth=AuthService(
                InMemoryUserStore(),
                session_ttl=timedelta(hours=config.auth.session_ttl_hours),
            ),
        )

    def categories(self, session: Session) -> CategoryRepository:
        return CategoryRepository(self.documents, session)

    def songs(self, session: Session) -> SongRepository:
        return SongRepository(
            self.documents,
            self.assets,
            session,
            janitor=self.janitor,
            max_audio_bytes=self.config.assets.max_audio_mb * MB,
            max_image_bytes=self.config.assets.max_image_mb * MB,
        )
