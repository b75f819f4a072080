from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from mezmurhub.context import AppContext
from mezmurhub.domain.auth import Session
from mezmurhub.domain.catalog import catalog_stats

from ..deps import get_context, require_session
from ..schemas import StatsResponse

router = APIRouter()


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    session: Session = Depends(require_session),
    ctx: AppContext = Depends(get_context),
):
    """Dashboard counts: songs, categories and songs added in the last 7 days."""
    try:
        stats = catalog_stats(ctx.documents)
        return StatsResponse(
            total_songs=stats.total_songs,
            total_categories=stats.total_categories,
            recent_songs=stats.recent_songs,
        )
    except Exception as e:
        logger.exception("Failed to compute stats")
        raise HTTPException(status_code=500, detail=f"Failed to get stats: {str(e)}")
