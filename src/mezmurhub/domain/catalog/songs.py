"""
Song repository.

Songs are listed newest first. Creating and updating a song may upload
audio / cover image assets; the rules for attaching, replacing and clearing
them live in ``lifecycle``. Uploads always finish before the document that
references them is written, and superseded objects are removed afterwards on
a best-effort basis through the ``AssetJanitor``.
"""

from datetime import datetime
from typing import Any, Callable, List, Optional

from loguru import logger

from mezmurhub.domain.auth.sessions import Session

from .assets import (
    AssetSlot,
    AssetStore,
    build_asset_key,
    probe_audio,
    validate_upload,
)
from .documents import DocumentStore
from .exceptions import AssetStoreError, NotFoundError, TransportError, ValidationError
from .lifecycle import AssetJanitor, SlotAction, SlotChange
from .lyrics import is_blank_lyrics, sanitize_lyrics
from .models import (
    SONGS_COLLECTION,
    AssetUpload,
    Song,
    SongDraft,
    SongUpdate,
    format_timestamp,
    normalize_category_ids,
    normalize_optional,
    utcnow,
)

AUDIO_METADATA_KEY = "audio"


def _validate_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Song title is required", field="title")
    return title


def _validate_lyrics(lyrics: Optional[str]) -> str:
    cleaned = sanitize_lyrics(lyrics or "")
    if is_blank_lyrics(cleaned):
        raise ValidationError("Song lyrics are required", field="lyrics")
    return cleaned


class SongRepository:
    """Create, read, update and delete songs and their attached assets."""

    def __init__(
        self,
        store: DocumentStore,
        assets: AssetStore,
        session: Session,
        janitor: Optional[AssetJanitor] = None,
        clock: Callable[[], datetime] = utcnow,
        max_audio_bytes: Optional[int] = None,
        max_image_bytes: Optional[int] = None,
    ) -> None:
        self.store = store
        self.assets = assets
        self.session = session
        self.janitor = janitor or AssetJanitor(assets, clock=clock)
        self._clock = clock
        self._limits = {
            AssetSlot.AUDIO: max_audio_bytes,
            AssetSlot.IMAGE: max_image_bytes,
        }

    # Reads

    def list(self) -> list[Song]:
        docs = self.store.list(SONGS_COLLECTION, order_by="createdAt", descending=True)
        return [Song.from_document(doc) for doc in docs]

    def list_by_category(self, category_id: str) -> List[Song]:
        """Songs whose ``categoryIds`` contain ``category_id``, newest first."""
        docs = self.store.list(
            SONGS_COLLECTION,
            order_by="createdAt",
            descending=True,
            array_contains=("categoryIds", category_id),
        )
        return [Song.from_document(doc) for doc in docs]

    def get(self, song_id: str) -> Optional[Song]:
        """Return the song, or None when it does not exist."""
        if not song_id:
            return None
        doc = self.store.get(SONGS_COLLECTION, song_id)
        return Song.from_document(doc) if doc else None

    def _require(self, song_id: str) -> dict[str, Any]:
        doc = self.store.get(SONGS_COLLECTION, song_id) if song_id else None
        if doc is None:
            raise NotFoundError(SONGS_COLLECTION, song_id)
        return doc

    # Asset helpers

    def _validate_upload(self, slot: AssetSlot, upload: Optional[AssetUpload]) -> None:
        if upload is not None:
            validate_upload(slot, upload, self._limits[slot])

    def _upload(self, slot: AssetSlot, upload: AssetUpload) -> str:
        key = build_asset_key(slot, upload.filename)
        try:
            return self.assets.upload(key, upload.data, upload.content_type)
        except AssetStoreError as e:
            raise TransportError(f"Failed to upload {slot.rules.label}: {e}") from e

    def _rollback(self, uploaded: List[tuple[AssetSlot, str]], reason: str) -> None:
        for slot, url in uploaded:
            self.janitor.discard(url, reason, slot)

    # Writes

    def create(self, draft: SongDraft) -> str:
        """Upload any assets, then persist the song and return its id.

        Raises:
            ValidationError: If title or lyrics are blank, no category is
                given, or an upload is of the wrong type or size
            TransportError: If an upload or the document write fails
        """
        title = _validate_title(draft.title)
        lyrics = _validate_lyrics(draft.lyrics)
        category_ids = normalize_category_ids(draft.category_ids)
        if not category_ids:
            raise ValidationError(
                "Select at least one category", field="category_ids"
            )
        self._validate_upload(AssetSlot.AUDIO, draft.audio)
        self._validate_upload(AssetSlot.IMAGE, draft.image)

        metadata = dict(draft.metadata or {})
        urls: dict[AssetSlot, Optional[str]] = {
            AssetSlot.AUDIO: None,
            AssetSlot.IMAGE: None,
        }
        uploaded: list[tuple[AssetSlot, str]] = []
        now = format_timestamp(self._clock())

        try:
            for slot, upload in (
                (AssetSlot.AUDIO, draft.audio),
                (AssetSlot.IMAGE, draft.image),
            ):
                if upload is None:
                    continue
                urls[slot] = self._upload(slot, upload)
                uploaded.append((slot, urls[slot]))

            if draft.audio is not None:
                audio_info = probe_audio(draft.audio)
                if audio_info:
                    metadata[AUDIO_METADATA_KEY] = audio_info

            song_id = self.store.add(
                SONGS_COLLECTION,
                {
                    "title": title,
                    "lyrics": lyrics,
                    "categoryIds": category_ids,
                    "audioUrl": urls[AssetSlot.AUDIO],
                    "thumbnailUrl": urls[AssetSlot.IMAGE],
                    "playCount": 0,
                    "createdAt": now,
                    "updatedAt": now,
                    "metadata": metadata,
                },
            )
        except Exception:
            self._rollback(uploaded, "song create failed")
            raise

        logger.info(f"Song '{title}' created as {song_id} by {self.session.actor}")
        return song_id

    def update(
        self,
        song_id: str,
        changes: SongUpdate,
        audio: SlotChange = SlotChange.keep(),
        image: SlotChange = SlotChange.keep(),
    ) -> Song:
        """Merge the provided fields and apply the slot changes.

        Untouched slots keep their stored URL verbatim. Replacement files are
        uploaded before the document is written; superseded and cleared
        objects are removed afterwards, and failures there are only logged.

        Raises:
            ValidationError: If a provided title or lyrics is blank, or an
                upload is of the wrong type or size
            NotFoundError: If the song does not exist
            TransportError: If an upload or the document write fails
        """
        fields: dict[str, Any] = {}
        if changes.title is not None:
            fields["title"] = _validate_title(changes.title)
        if changes.lyrics is not None:
            fields["lyrics"] = _validate_lyrics(changes.lyrics)
        if changes.category_ids is not None:
            fields["categoryIds"] = normalize_category_ids(changes.category_ids)
        self._validate_upload(AssetSlot.AUDIO, audio.upload)
        self._validate_upload(AssetSlot.IMAGE, image.upload)

        existing = self._require(song_id)

        metadata = dict(existing.get("metadata") or {})
        metadata_changed = False
        if changes.metadata is not None:
            metadata.update(changes.metadata)
            metadata_changed = True

        superseded: list[tuple[AssetSlot, str]] = []
        uploaded: list[tuple[AssetSlot, str]] = []

        try:
            for slot, change in ((AssetSlot.AUDIO, audio), (AssetSlot.IMAGE, image)):
                if change.action is SlotAction.KEEP:
                    continue
                old_url = normalize_optional(existing.get(slot.rules.field))
                if change.action is SlotAction.REPLACE:
                    new_url = self._upload(slot, change.upload)
                    uploaded.append((slot, new_url))
                    fields[slot.rules.field] = new_url
                else:
                    fields[slot.rules.field] = None
                if old_url:
                    superseded.append((slot, old_url))

            if audio.action is SlotAction.REPLACE:
                audio_info = probe_audio(audio.upload)
                if audio_info:
                    metadata[AUDIO_METADATA_KEY] = audio_info
                else:
                    metadata.pop(AUDIO_METADATA_KEY, None)
                metadata_changed = True
            elif audio.action is SlotAction.CLEAR and AUDIO_METADATA_KEY in metadata:
                del metadata[AUDIO_METADATA_KEY]
                metadata_changed = True

            if metadata_changed:
                fields["metadata"] = metadata
            fields["updatedAt"] = format_timestamp(self._clock())

            self.store.update(SONGS_COLLECTION, song_id, fields)
        except Exception:
            self._rollback(uploaded, f"update of song {song_id} failed")
            raise

        for slot, old_url in superseded:
            self.janitor.discard(old_url, f"superseded on song {song_id}", slot)

        logger.info(
            f"Song {song_id} updated ({', '.join(sorted(fields))}) "
            f"by {self.session.actor}"
        )
        song = self.get(song_id)
        if song is None:
            raise NotFoundError(SONGS_COLLECTION, song_id)
        return song

    def delete(self, song_id: str) -> None:
        """Remove the song's assets (best-effort), then the song itself.

        Raises:
            NotFoundError: If the song does not exist
        """
        doc = self._require(song_id)

        for slot in (AssetSlot.AUDIO, AssetSlot.IMAGE):
            url = normalize_optional(doc.get(slot.rules.field))
            if url:
                self.janitor.discard(url, f"song {song_id} deleted", slot)

        if not self.store.delete(SONGS_COLLECTION, song_id):
            logger.warning(f"Song {song_id} was already gone when deleting it")
            return
        logger.info(f"Song {song_id} deleted by {self.session.actor}")

    def record_play(self, song_id: str) -> Song:
        """Increment ``playCount`` by one.

        Raises:
            NotFoundError: If the song does not exist
        """
        doc = self._require(song_id)
        play_count = max(int(doc.get("playCount") or 0), 0) + 1
        self.store.update(
            SONGS_COLLECTION,
            song_id,
            {"playCount": play_count, "updatedAt": format_timestamp(self._clock())},
        )
        song = self.get(song_id)
        if song is None:
            raise NotFoundError(SONGS_COLLECTION, song_id)
        return song
