from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, Request

from mezmurhub.context import AppContext
from mezmurhub.core.config import (
    Config,
    ensure_directories,
    get_log_file_path,
    load_config,
)
from mezmurhub.core.output import setup_loguru
from mezmurhub.domain.auth import AuthService, Session
from mezmurhub.domain.catalog import CategoryRepository, SongRepository


@lru_cache(maxsize=1)
def get_context() -> AppContext:
    """FastAPI dependency for the shared stores and services (built once)."""
    config = load_config()
    ensure_directories(config)
    setup_loguru(
        get_log_file_path(config),
        level=config.logging.level,
        max_file_size_mb=config.logging.max_file_size_mb,
        backup_count=config.logging.backup_count,
        console_output=config.logging.console_output,
    )
    return AppContext.create(config)


def get_config(ctx: AppContext = Depends(get_context)) -> Config:
    """FastAPI dependency for configuration."""
    return ctx.config


def get_auth_service(ctx: AppContext = Depends(get_context)) -> AuthService:
    return ctx.auth


def get_session_token(
    request: Request, ctx: AppContext = Depends(get_context)
) -> Optional[str]:
    """Bearer token from the Authorization header, else the session cookie."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return request.cookies.get(ctx.config.auth.cookie_name)


def require_session(
    token: Optional[str] = Depends(get_session_token),
    auth: AuthService = Depends(get_auth_service),
) -> Session:
    """FastAPI dependency for the signed-in identity; 401 when there is none."""
    session = auth.get_session(token)
    if session is None:
        raise HTTPException(status_code=401, detail="Not signed in")
    return session


def get_category_repository(
    session: Session = Depends(require_session),
    ctx: AppContext = Depends(get_context),
) -> CategoryRepository:
    return ctx.categories(session)


def get_song_repository(
    session: Session = Depends(require_session),
    ctx: AppContext = Depends(get_context),
) -> SongRepository:
    return ctx.songs(session)
