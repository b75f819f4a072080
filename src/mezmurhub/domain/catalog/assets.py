"""
Asset store for uploaded audio tracks and cover images.

Objects are addressed by path-like keys of the form
``{prefix}{unixMillis}_{sanitizedFilename}``; the prefix is ``songs/`` for
audio and ``song-images/`` for images. Uploading returns a fetchable URL,
and ``key_for_url`` maps such a URL back to its key so superseded objects
can be removed later.
"""

import io
import re
import threading
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Protocol

from loguru import logger

from .exceptions import AssetNotFoundError, AssetStoreError, ValidationError
from .models import AssetUpload

MB = 1024 * 1024

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


@dataclass(frozen=True)
class SlotRules:
    prefix: str
    field: str  # Song document field holding the URL
    allowed_types: frozenset[str]
    max_bytes: int
    label: str


class AssetSlot(Enum):
    """The two asset references a song can carry."""

    AUDIO = SlotRules(
        prefix="songs/",
        field="audioUrl",
        allowed_types=frozenset({"audio/mpeg", "audio/mp3", "audio/wav", "audio/aac"}),
        max_bytes=50 * MB,
        label="audio",
    )
    IMAGE = SlotRules(
        prefix="song-images/",
        field="thumbnailUrl",
        allowed_types=frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp"}),
        max_bytes=5 * MB,
        label="image",
    )

    @property
    def rules(self) -> SlotRules:
        return self.value


class AssetStore(Protocol):
    """Contract every asset store backend satisfies."""

    def upload(self, key: str, data: bytes, content_type: str) -> str: ...

    def delete(self, key: str) -> None: ...

    def exists(self, key: str) -> bool: ...

    def key_for_url(self, url: str) -> Optional[str]: ...


_stamp_lock = threading.Lock()
_last_stamp = 0


def next_upload_stamp() -> int:
    """Current unix time in milliseconds, strictly increasing within the process."""
    global _last_stamp
    with _stamp_lock:
        stamp = time.time_ns() // 1_000_000
        if stamp <= _last_stamp:
            stamp = _last_stamp + 1
        _last_stamp = stamp
        return stamp


def sanitize_filename(filename: str) -> str:
    """Replace every character outside ``[a-zA-Z0-9._-]`` with an underscore."""
    return _UNSAFE_FILENAME_CHARS.sub("_", filename or "") or "file"


def build_asset_key(slot: AssetSlot, filename: str, stamp: Optional[int] = None) -> str:
    """Storage key for a new upload into ``slot``."""
    stamp = next_upload_stamp() if stamp is None else stamp
    return f"{slot.rules.prefix}{stamp}_{sanitize_filename(filename)}"


def validate_upload(
    slot: AssetSlot, upload: AssetUpload, max_bytes: Optional[int] = None
) -> None:
    """Check MIME type and size before anything is uploaded.

    Raises:
        ValidationError: If the file is empty, too large or of the wrong type
    """
    rules = slot.rules
    limit = max_bytes if max_bytes is not None else rules.max_bytes
    content_type = (upload.content_type or "").split(";")[0].strip().lower()

    if content_type not in rules.allowed_types:
        raise ValidationError(
            f"Unsupported {rules.label} type '{upload.content_type}'. "
            f"Allowed: {', '.join(sorted(rules.allowed_types))}",
            field=rules.label,
        )
    if upload.size == 0:
        raise ValidationError(f"The {rules.label} file is empty", field=rules.label)
    if upload.size > limit:
        raise ValidationError(
            f"The {rules.label} file must be less than {limit // MB}MB",
            field=rules.label,
        )


def probe_audio(upload: AssetUpload) -> dict[str, Any]:
    """Read duration and bitrate from an audio payload with mutagen.

    Returns an empty dict when mutagen cannot parse the data.
    """
    from mutagen import File as MutagenFile
    from mutagen import MutagenError

    fileobj = io.BytesIO(upload.data)
    fileobj.name = upload.filename  # mutagen uses the name as a type hint
    try:
        audio_file = MutagenFile(fileobj)
    except (MutagenError, ValueError, OSError) as e:
        logger.debug(f"Could not probe audio {upload.filename}: {e}")
        return {}
    if audio_file is None or audio_file.info is None:
        return {}

    info: dict[str, Any] = {}
    length = getattr(audio_file.info, "length", None)
    if length:
        info["durationSeconds"] = round(float(length), 2)
    bitrate = getattr(audio_file.info, "bitrate", None)
    if bitrate:
        info["bitrate"] = int(bitrate)
    return info


class _UrlMapping:
    """Shared URL <-> key mapping for stores that serve under a base URL."""

    def __init__(self, public_base_url: str) -> None:
        self.public_base_url = public_base_url.rstrip("/")

    def url_for_key(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    def key_for_url(self, url: str) -> Optional[str]:
        prefix = f"{self.public_base_url}/"
        if not url or not url.startswith(prefix):
            return None
        key = url[len(prefix):].split("?", 1)[0]
        return key or None


class LocalAssetStore(_UrlMapping):
    """Assets stored as files below a root directory."""

    def __init__(self, root: Path, public_base_url: str = "/assets") -> None:
        super().__init__(public_base_url)
        self.root = Path(root)

    def path_for_key(self, key: str) -> Path:
        """Resolve a key to a file below the root.

        Raises:
            AssetStoreError: If the key escapes the root directory
        """
        root = self.root.resolve()
        path = (root / key).resolve()
        if path == root or root not in path.parents:
            raise AssetStoreError(f"Invalid asset key: {key}")
        return path

    def upload(self, key: str, data: bytes, content_type: str) -> str:
        path = self.path_for_key(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise AssetStoreError(f"Failed to write asset {key}: {e}") from e
        logger.info(f"Stored asset {key} ({len(data)} bytes, {content_type})")
        return self.url_for_key(key)

    def delete(self, key: str) -> None:
        path = self.path_for_key(key)
        try:
            path.unlink()
        except FileNotFoundError:
            raise AssetNotFoundError(key)
        except OSError as e:
            raise AssetStoreError(f"Failed to delete asset {key}: {e}") from e

    def exists(self, key: str) -> bool:
        try:
            return self.path_for_key(key).is_file()
        except AssetStoreError:
            return False

    def open(self, key: str) -> Path:
        """Path of an existing asset, for serving it.

        Raises:
            AssetNotFoundError: If no object is stored under ``key``
        """
        path = self.path_for_key(key)
        if not path.is_file():
            raise AssetNotFoundError(key)
        return path


class InMemoryAssetStore(_UrlMapping):
    """Dictionary-backed asset store used by tests and the ``memory`` backend."""

    def __init__(self, public_base_url: str = "/assets") -> None:
        super().__init__(public_base_url)
        self.objects: dict[str, tuple[bytes, str]] = {}
        self._lock = threading.Lock()

    def upload(self, key: str, data: bytes, content_type: str) -> str:
        with self._lock:
            self.objects[key] = (bytes(data), content_type)
        return self.url_for_key(key)

    def delete(self, key: str) -> None:
        with self._lock:
            if self.objects.pop(key, None) is None:
                raise AssetNotFoundError(key)

    def exists(self, key: str) -> bool:
        with self._lock:
            return key in self.objects

    def read(self, key: str) -> tuple[bytes, str]:
        with self._lock:
            try:
                return self.objects[key]
            except KeyError:
                raise AssetNotFoundError(key) from None
