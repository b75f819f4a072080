import mimetypes

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse, Response

from mezmurhub.context import AppContext
from mezmurhub.domain.catalog import AssetStoreError, InMemoryAssetStore, LocalAssetStore

from ..deps import get_context

router = APIRouter()


@router.get("/assets/{key:path}")
async def get_asset(key: str, ctx: AppContext = Depends(get_context)):
    """Serve an uploaded asset. Public, like the URLs stored on songs."""
    store = ctx.assets
    try:
        if isinstance(store, LocalAssetStore):
            path = store.open(key)
            media_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
            return FileResponse(path, media_type=media_type)
        if isinstance(store, InMemoryAssetStore):
            data, content_type = store.read(key)
            return Response(content=data, media_type=content_type)
    except AssetStoreError:
        raise HTTPException(status_code=404, detail="Asset not found")

    raise HTTPException(status_code=404, detail="Asset not served by this backend")
