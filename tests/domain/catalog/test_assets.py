"""Tests for asset keys, upload validation and the asset store backends."""

import pytest

from mezmurhub.domain.catalog import (
    AssetSlot,
    AssetUpload,
    InMemoryAssetStore,
    LocalAssetStore,
    ValidationError,
    build_asset_key,
    validate_upload,
)
from mezmurhub.domain.catalog.assets import (
    MB,
    next_upload_stamp,
    probe_audio,
    sanitize_filename,
)
from mezmurhub.domain.catalog.exceptions import AssetNotFoundError, AssetStoreError


class TestAssetKeys:
    def test_sanitize_filename(self):
        assert sanitize_filename("My Song (live).mp3") == "My_Song__live_.mp3"
        assert sanitize_filename("ok-name_1.wav") == "ok-name_1.wav"
        assert sanitize_filename("") == "file"

    def test_key_layout(self):
        assert build_asset_key(AssetSlot.AUDIO, "a b.mp3", stamp=1700000000000) == (
            "songs/1700000000000_a_b.mp3"
        )
        assert build_asset_key(AssetSlot.IMAGE, "c.png", stamp=5) == "song-images/5_c.png"

    def test_identical_names_never_collide(self):
        keys = {build_asset_key(AssetSlot.AUDIO, "same.mp3") for _ in range(100)}
        assert len(keys) == 100

    def test_stamps_strictly_increase(self):
        stamps = [next_upload_stamp() for _ in range(50)]
        assert stamps == sorted(set(stamps))


class TestValidateUpload:
    @pytest.mark.parametrize(
        "content_type", ["audio/mpeg", "audio/mp3", "audio/wav", "audio/aac"]
    )
    def test_accepted_audio_types(self, content_type):
        validate_upload(AssetSlot.AUDIO, AssetUpload("a", content_type, b"x"))

    def test_content_type_parameters_ignored(self):
        validate_upload(AssetSlot.IMAGE, AssetUpload("a", "Image/PNG; q=1", b"x"))

    def test_image_type_rejected_for_audio(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_upload(AssetSlot.AUDIO, AssetUpload("a.png", "image/png", b"x"))
        assert exc_info.value.field == "audio"

    def test_empty_file_rejected(self):
        with pytest.raises(ValidationError):
            validate_upload(AssetSlot.IMAGE, AssetUpload("a.png", "image/png", b""))

    def test_default_image_limit_is_5mb(self):
        validate_upload(AssetSlot.IMAGE, AssetUpload("a", "image/png", b"x" * 5 * MB))
        with pytest.raises(ValidationError):
            validate_upload(
                AssetSlot.IMAGE, AssetUpload("a", "image/png", b"x" * (5 * MB + 1))
            )

    def test_explicit_limit(self):
        with pytest.raises(ValidationError):
            validate_upload(
                AssetSlot.AUDIO, AssetUpload("a", "audio/mpeg", b"12345"), max_bytes=4
            )


class TestProbeAudio:
    def test_unreadable_payload_gives_empty_dict(self):
        assert probe_audio(AssetUpload("a.txt", "audio/mpeg", b"not audio")) == {}


class TestLocalAssetStore:
    @pytest.fixture
    def local_store(self, tmp_path):
        return LocalAssetStore(tmp_path / "assets", public_base_url="/assets/")

    def test_upload_and_delete(self, local_store, tmp_path):
        url = local_store.upload("songs/1_a.mp3", b"data", "audio/mpeg")

        assert url == "/assets/songs/1_a.mp3"
        assert local_store.key_for_url(url) == "songs/1_a.mp3"
        assert (tmp_path / "assets" / "songs" / "1_a.mp3").read_bytes() == b"data"
        assert local_store.open("songs/1_a.mp3").name == "1_a.mp3"

        local_store.delete("songs/1_a.mp3")
        assert not local_store.exists("songs/1_a.mp3")

    def test_delete_missing_key(self, local_store):
        with pytest.raises(AssetNotFoundError):
            local_store.delete("songs/missing.mp3")

    def test_key_cannot_escape_root(self, local_store):
        with pytest.raises(AssetStoreError):
            local_store.upload("../outside.txt", b"x", "text/plain")
        assert not local_store.exists("../outside.txt")

    def test_foreign_url_not_owned(self, local_store):
        assert local_store.key_for_url("https://cdn.example.com/songs/1_a.mp3") is None
        assert local_store.key_for_url("/assets/songs/1_a.mp3?v=2") == "songs/1_a.mp3"


class TestInMemoryAssetStore:
    def test_read_and_delete(self):
        store = InMemoryAssetStore()
        url = store.upload("song-images/1_c.png", b"img", "image/png")

        assert store.read(store.key_for_url(url)) == (b"img", "image/png")
        store.delete("song-images/1_c.png")
        with pytest.raises(AssetNotFoundError):
            store.delete("song-images/1_c.png")
