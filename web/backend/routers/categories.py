from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from mezmurhub.domain.catalog import (
    Category,
    CategoryRepository,
    CategoryUpdate,
    NotFoundError,
    SongRepository,
    ValidationError,
)

from ..deps import get_category_repository, get_song_repository
from ..schemas import (
    CategoryCreateRequest,
    CategoryInfo,
    CategoryListResponse,
    CategoryUpdateRequest,
    CreatedResponse,
    SongListResponse,
)
from .songs import song_info

router = APIRouter()


def category_info(category: Category) -> CategoryInfo:
    return CategoryInfo(
        id=category.id,
        name=category.name,
        description=category.description,
        icon_url=category.icon_url,
        order=category.order,
        created_at=category.created_at,
    )


@router.get("/categories", response_model=CategoryListResponse)
async def list_categories(
    categories: CategoryRepository = Depends(get_category_repository),
):
    """All categories in ascending display order."""
    try:
        return CategoryListResponse(
            categories=[category_info(c) for c in categories.list()]
        )
    except Exception as e:
        logger.exception("Failed to list categories")
        raise HTTPException(
            status_code=500, detail=f"Failed to list categories: {str(e)}"
        )


@router.post("/categories", response_model=CreatedResponse, status_code=201)
async def create_category(
    request: CategoryCreateRequest,
    categories: CategoryRepository = Depends(get_category_repository),
):
    try:
        category_id = categories.create(
            request.name,
            description=request.description,
            order=request.order,
            icon_url=request.icon_url,
        )
        return CreatedResponse(id=category_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Failed to create category")
        raise HTTPException(
            status_code=500, detail=f"Failed to create category: {str(e)}"
        )


@router.get("/categories/{category_id}", response_model=CategoryInfo)
async def get_category(
    category_id: str,
    categories: CategoryRepository = Depends(get_category_repository),
):
    try:
        category = categories.get(category_id)
        if category is None:
            raise HTTPException(status_code=404, detail="Category not found")
        return category_info(category)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to get category {category_id}")
        raise HTTPException(
            status_code=500, detail=f"Failed to get category: {str(e)}"
        )


@router.patch("/categories/{category_id}", response_model=CategoryInfo)
async def update_category(
    category_id: str,
    request: CategoryUpdateRequest,
    categories: CategoryRepository = Depends(get_category_repository),
):
    """Change only the fields present in the request body."""
    try:
        changes = CategoryUpdate(**request.model_dump(exclude_unset=True))
        return category_info(categories.update(category_id, changes))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Category not found")
    except Exception as e:
        logger.exception(f"Failed to update category {category_id}")
        raise HTTPException(
            status_code=500, detail=f"Failed to update category: {str(e)}"
        )


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: str,
    categories: CategoryRepository = Depends(get_category_repository),
):
    """Delete a category. Songs keep their reference to it."""
    try:
        categories.delete(category_id)
        return {"success": True}
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Category not found")
    except Exception as e:
        logger.exception(f"Failed to delete category {category_id}")
        raise HTTPException(
            status_code=500, detail=f"Failed to delete category: {str(e)}"
        )


@router.get("/categories/{category_id}/songs", response_model=SongListResponse)
async def list_category_songs(
    category_id: str,
    songs: SongRepository = Depends(get_song_repository),
):
    """Songs tagged with the category, newest first."""
    try:
        return SongListResponse(
            songs=[song_info(s) for s in songs.list_by_category(category_id)]
        )
    except Exception as e:
        logger.exception(f"Failed to list songs for category {category_id}")
        raise HTTPException(status_code=500, detail=f"Failed to list songs: {str(e)}")
