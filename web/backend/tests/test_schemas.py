"""Tests for backend schemas."""

from datetime import datetime, timezone

from web.backend.schemas import CategoryUpdateRequest, SongDetail, StatsResponse


def test_category_update_tracks_sent_fields():
    """Only fields present in the body end up in the partial update."""
    request = CategoryUpdateRequest.model_validate({"name": "Praise", "description": ""})
    assert request.model_dump(exclude_unset=True) == {"name": "Praise", "description": ""}


def test_song_detail_defaults():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    song = SongDetail(
        id="s1",
        title="Song",
        lyrics="<p>x</p>",
        category_ids=["gone"],
        play_count=0,
        created_at=now,
        updated_at=now,
    )

    assert song.audio_url is None
    assert song.metadata == {}
    assert song.category_names == []


def test_stats_response():
    stats = StatsResponse(total_songs=3, total_categories=2, recent_songs=1)
    assert stats.model_dump() == {"total_songs": 3, "total_categories": 2, "recent_songs": 1}
