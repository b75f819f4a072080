"""Dashboard statistics for the catalog."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .documents import DocumentStore
from .models import CATEGORIES_COLLECTION, SONGS_COLLECTION, parse_timestamp, utcnow

RECENT_WINDOW = timedelta(days=7)


@dataclass(frozen=True)
class CatalogStats:
    total_songs: int
    total_categories: int
    recent_songs: int


def catalog_stats(
    store: DocumentStore,
    now: Optional[datetime] = None,
    window: timedelta = RECENT_WINDOW,
) -> CatalogStats:
    """Count songs and categories, plus songs created within ``window`` of ``now``."""
    now = now or utcnow()
    since = now - window
    songs = store.list(SONGS_COLLECTION)
    categories = store.list(CATEGORIES_COLLECTION)
    recent = sum(1 for doc in songs if parse_timestamp(doc.get("createdAt")) >= since)
    return CatalogStats(
        total_songs=len(songs),
        total_categories=len(categories),
        recent_songs=recent,
    )
