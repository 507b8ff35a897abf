import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import RedirectResponse

from app import dependencies as deps
from app.db.prismic import DocumentNotFound, PrismicError
from app.services.posts_service import PostsService
from app.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/preview")
async def enter_preview(
    token: str = Query(..., min_length=1, description="Prismic preview ref"),
    documentId: str = Query(..., min_length=1),
    service: PostsService = Depends(deps.get_posts_service),
):
    """
    Resolve the previewed document, remember the preview ref in a cookie and
    send the browser to the post page.
    """
    try:
        uid = await service.resolve_preview(documentId, token)
    except DocumentNotFound:
        raise HTTPException(status_code=404, detail="Previewed document not found")
    except (PrismicError, ValueError) as e:
        logger.warning(f"Could not start preview for {documentId}: {e}")
        raise HTTPException(status_code=400, detail="Invalid preview token")

    logger.info(f"Entering preview mode for {uid}")
    response = RedirectResponse(url=f"/posts/{uid}", status_code=307)
    response.set_cookie(
        settings.PREVIEW_COOKIE_NAME,
        token,
        max_age=settings.PREVIEW_COOKIE_MAX_AGE,
        httponly=True,
        samesite="lax",
    )
    return response


@router.get("/exit-preview")
def exit_preview():
    logger.info("Leaving preview mode")
    response = RedirectResponse(url="/", status_code=307)
    response.delete_cookie(settings.PREVIEW_COOKIE_NAME)
    return response
