import json
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from loguru import logger

from mezmurhub.domain.catalog import (
    AssetUpload,
    CategoryRepository,
    NotFoundError,
    SlotChange,
    Song,
    SongDraft,
    SongRepository,
    SongUpdate,
    ValidationError,
)

from ..deps import get_category_repository, get_song_repository
from ..schemas import CreatedResponse, SongDetail, SongInfo, SongListResponse

router = APIRouter()


def song_info(song: Song) -> SongInfo:
    return SongInfo(
        id=song.id,
        title=song.title,
        lyrics=song.lyrics,
        category_ids=song.category_ids,
        audio_url=song.audio_url,
        thumbnail_url=song.thumbnail_url,
        play_count=song.play_count,
        created_at=song.created_at,
        updated_at=song.updated_at,
        metadata=song.metadata,
    )


async def read_upload(file: Optional[UploadFile]) -> Optional[AssetUpload]:
    """Convert a multipart file into an AssetUpload; an empty file part means none."""
    if file is None or not file.filename:
        return None
    data = await file.read()
    return AssetUpload(
        filename=file.filename,
        content_type=file.content_type or "application/octet-stream",
        data=data,
    )


def _parse_metadata(raw: Optional[str]) -> Optional[dict[str, Any]]:
    if raw is None or not raw.strip():
        return None
    try:
        metadata = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"metadata must be a JSON object: {e}", field="metadata")
    if not isinstance(metadata, dict):
        raise ValidationError("metadata must be a JSON object", field="metadata")
    return metadata


def _submitted(form: Any, name: str, value: Optional[str]) -> Optional[str]:
    # FastAPI hands a blank form value to the handler as the default (None)
    if value is None and name in form:
        return ""
    return value


@router.get("/songs",response_model=SongListResponse)
async def list_songs(songs: SongRepository = Depends(get_song_repository)):
    """All songs, newest first."""
    try:
        return SongListResponse(songs=[song_info(s) for s in songs.list()])
    except Exception as e:
        logger.exception("Failed to list songs")
        raise HTTPException(status_code=500, detail=f"Failed to list songs: {str(e)}")


@router.post("/songs", response_model=CreatedResponse, status_code=201)
async def create_song(
    title: str = Form(""),
    lyrics: str = Form(""),
    category_ids: List[str] = Form(default=[]),
    metadata: Optional[str] = Form(None),
    audio: Optional[UploadFile] = File(None),
    image: Optional[UploadFile] = File(None),
    songs: SongRepository = Depends(get_song_repository),
):
    """Create a song from a multipart form, uploading any audio / image first."""
    try:
        draft = SongDraft(
            title=title,
            lyrics=lyrics,
            category_ids=category_ids,
            audio=await read_upload(audio),
            image=await read_upload(image),
            metadata=_parse_metadata(metadata) or {},
        )
        return CreatedResponse(id=songs.create(draft))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Failed to create song")
        raise HTTPException(status_code=500, detail=f"Failed to create song: {str(e)}")


@router.get("/songs/{song_id}", response_model=SongDetail)
async def get_song(
    song_id: str,
    songs: SongRepository = Depends(get_song_repository),
    categories: CategoryRepository = Depends(get_category_repository),
):
    """A song with the names of the categories that still exist."""
    try:
        song = songs.get(song_id)
        if song is None:
            raise HTTPException(status_code=404, detail="Song not found")
        return SongDetail(
            **song_info(song).model_dump(),
            category_names=categories.resolve_names(song.category_ids),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to get song {song_id}")
        raise HTTPException(status_code=500, detail=f"Failed to get song: {str(e)}")


@router.patch("/songs/{song_id}", response_model=SongInfo)
async def update_song(
    song_id: str,
    request: Request,
    title: Optional[str] = Form(None),
    lyrics: Optional[str] = Form(None),
    category_ids: Optional[List[str]] = Form(None),
    metadata: Optional[str] = Form(None),
    audio: Optional[UploadFile] = File(None),
    image: Optional[UploadFile] = File(None),
    remove_audio: bool = Form(False),
    remove_image: bool = Form(False),
    songs: SongRepository = Depends(get_song_repository),
):
    """Update a song from a multipart form.

    Omitted fields are left alone. A new file replaces the slot's asset,
    ``remove_audio`` / ``remove_image`` clear it. A single empty
    ``category_ids`` value clears the categories. A title or lyrics field
    that is sent blank is rejected rather than ignored.
    """
    try:
        form = await request.form()
        changes = SongUpdate(
            title=_submitted(form, "title", title),
            lyrics=_submitted(form, "lyrics", lyrics),
            category_ids=category_ids,
            metadata=_parse_metadata(metadata),
        )
        updated = songs.update(
            song_id,
            changes,
            audio=SlotChange.from_form(await read_upload(audio), remove_audio),
            image=SlotChange.from_form(await read_upload(image), remove_image),
        )
        return song_info(updated)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Song not found")
    except Exception as e:
        logger.exception(f"Failed to update song {song_id}")
        raise HTTPException(status_code=500, detail=f"Failed to update song: {str(e)}")


@router.delete("/songs/{song_id}")
async def delete_song(
    song_id: str,
    songs: SongRepository = Depends(get_song_repository),
):
    """Delete a song; asset removal failures do not block it."""
    try:
        songs.delete(song_id)
        return {"success": True}
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Song not found")
    except Exception as e:
        logger.exception(f"Failed to delete song {song_id}")
        raise HTTPException(status_code=500, detail=f"Failed to delete song: {str(e)}")


@router.post("/songs/{song_id}/play", response_model=SongInfo)
async def record_play(
    song_id: str,
    songs: SongRepository = Depends(get_song_repository),
):
    try:
        return song_info(songs.record_play(song_id))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Song not found")
    except Exception as e:
        logger.exception(f"Failed to record play for song {song_id}")
        raise HTTPException(status_code=500, detail=f"Failed to record play: {str(e)}")
