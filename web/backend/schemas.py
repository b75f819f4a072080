from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str
    password: str


class UserInfo(BaseModel):
    uid: str
    email: str
    is_admin: bool


class LoginResponse(BaseModel):
    token: str
    expires_at: Optional[datetime] = None
    user: UserInfo


class CategoryInfo(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    icon_url: Optional[str] = None
    order: int
    created_at: datetime


class CategoryCreateRequest(BaseModel):
    name: str
    description: Optional[str] = None
    icon_url: Optional[str] = None
    order: int = 0


class CategoryUpdateRequest(BaseModel):
    """Only the fields that are sent are changed; "" clears description / icon."""

    name: Optional[str] = None
    description: Optional[str] = None
    icon_url: Optional[str] = None
    order: Optional[int] = None


class CategoryListResponse(BaseModel):
    categories: list[CategoryInfo]


class SongInfo(BaseModel):
    id: str
    title: str
    lyrics: str
    category_ids: list[str]
    audio_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    play_count: int
    created_at: datetime
    updated_at: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)


class SongDetail(SongInfo):
    category_names: list[str] = Field(default_factory=list)  # unresolved ids omitted


class SongListResponse(BaseModel):
    songs: list[SongInfo]


class CreatedResponse(BaseModel):
    id: str


class StatsResponse(BaseModel):
    total_songs: int
    total_categories: int
    recent_songs: int  # created in the last 7 days
