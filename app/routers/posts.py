import logging
from typing import List, Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException
from starlette.status import HTTP_502_BAD_GATEWAY

from app import dependencies as deps
from app.db.prismic import DocumentNotFound, TransientFetchFailure
from app.schemas.blog import PostView, StaticPath
from app.security import get_revalidate_key
from app.services.posts_service import PostsService
from app.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/posts/paths", response_model=List[StaticPath])
async def list_static_paths(service: PostsService = Depends(deps.get_posts_service)):
    """Sample of post uids to pre-generate; every other uid resolves on first hit."""
    try:
        return await service.list_static_paths()
    except TransientFetchFailure as e:
        logger.warning(f"Content store unavailable while listing paths: {e}")
        raise HTTPException(
            status_code=HTTP_502_BAD_GATEWAY, detail="Content store unavailable"
        )
    except Exception as e:
        logger.error(f"Unexpected error listing static paths: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve paths")


@router.get("/posts/{uid}", response_model=PostView)
async def get_post(
    uid: str,
    preview_token: Optional[str] = Cookie(
        default=None, alias=settings.PREVIEW_COOKIE_NAME
    ),
    service: PostsService = Depends(deps.get_posts_service),
):
    """Get the assembled page for a single post."""
    try:
        return await service.get_post_view(uid, preview_token=preview_token)
    except HTTPException:
        raise
    except DocumentNotFound:
        raise HTTPException(status_code=404, detail="Post not found")
    except TransientFetchFailure as e:
        logger.warning(f"Content store unavailable for post {uid}: {e}")
        raise HTTPException(
            status_code=HTTP_502_BAD_GATEWAY, detail="Content store unavailable"
        )
    except Exception as e:
        logger.error(f"Unexpected error retrieving post {uid}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve post")


@router.post("/revalidate/{uid}", dependencies=[Depends(get_revalidate_key)])
def revalidate_post(
    uid: str,
    service: PostsService = Depends(deps.get_posts_service),
):
    """Drop the cached page so the next request regenerates it."""
    dropped = service.revalidate(uid)
    logger.info(f"On-demand revalidation for {uid} (cached={dropped})")
    return {"revalidated": dropped}
