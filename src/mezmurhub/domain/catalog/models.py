"""
Catalog domain models.

Contains data structures for songs, categories and uploads, plus the
conversion to and from stored documents. Conversion is the one place where
missing, null and empty-string values are folded into a single absent value
(``None``), so everything above this module sees normalized data.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

SONGS_COLLECTION = "songs"
CATEGORIES_COLLECTION = "categories"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Fixed-width UTC timestamp; lexical order equals chronological order."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: Any) -> datetime:
    """Parse a stored timestamp. Missing or unreadable values become EPOCH."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str) and value:
        try:
            return datetime.strptime(value, TIMESTAMP_FORMAT).replace(
                tzinfo=timezone.utc
            )
        except ValueError:
            try:
                parsed = datetime.fromisoformat(value)
            except ValueError:
                return EPOCH
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return EPOCH


def normalize_optional(value: Any) -> Optional[str]:
    """Fold missing / null / blank strings into None."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return str(value)


def normalize_category_ids(value: Any) -> list[str]:
    """Drop blanks and duplicates, keeping first occurrence order."""
    if not value:
        return []
    seen: dict[str, None] = {}
    for item in value:
        if item is None:
            continue
        item = str(item).strip()
        if item and item not in seen:
            seen[item] = None
    return list(seen)


@dataclass(frozen=True)
class Category:
    """A named group of songs, displayed in ascending ``order``."""

    id: str
    name: str
    description: Optional[str] = None
    icon_url: Optional[str] = None
    order: int = 0
    created_at: datetime = EPOCH

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Category":
        return cls(
            id=doc["id"],
            name=doc.get("name") or "",
            description=normalize_optional(doc.get("description")),
            icon_url=normalize_optional(doc.get("iconUrl")),
            order=int(doc.get("order") or 0),
            created_at=parse_timestamp(doc.get("createdAt")),
        )


@dataclass(frozen=True)
class Song:
    """A song with rich-text lyrics and optional audio / cover image assets."""

    id: str
    title: str
    lyrics: str
    category_ids: list[str] = field(default_factory=list)
    audio_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    play_count: int = 0
    created_at: datetime = EPOCH
    updated_at: datetime = EPOCH
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Song":
        return cls(
            id=doc["id"],
            title=doc.get("title") or "",
            lyrics=doc.get("lyrics") or "",
            category_ids=normalize_category_ids(doc.get("categoryIds")),
            audio_url=normalize_optional(doc.get("audioUrl")),
            thumbnail_url=normalize_optional(doc.get("thumbnailUrl")),
            play_count=max(int(doc.get("playCount") or 0), 0),
            created_at=parse_timestamp(doc.get("createdAt")),
            updated_at=parse_timestamp(doc.get("updatedAt")),
            metadata=dict(doc.get("metadata") or {}),
        )


@dataclass
class CategoryUpdate:
    """Partial category update. ``None`` leaves a field untouched.

    An empty ``description`` or ``icon_url`` clears the field.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    icon_url: Optional[str] = None
    order: Optional[int] = None


@dataclass
class AssetUpload:
    """A file chosen for upload into an asset slot."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class SongDraft:
    """Fields for a new song. Assets are uploaded before the document is written."""

    title: str
    lyrics: str
    category_ids: list[str] = field(default_factory=list)
    audio: Optional[AssetUpload] = None
    image: Optional[AssetUpload] = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class SongUpdate:
    """Partial song update. ``None`` leaves a field untouched.

    Asset slots are not part of this; they are changed with ``SlotChange``.
    """

    title: Optional[str] = None
    lyrics: Optional[str] = None
    category_ids: Optional[list[str]] = None
    metadata: Optional[dict[str, Any]] = None
