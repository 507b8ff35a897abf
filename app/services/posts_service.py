import logging
from typing import List, Optional

from app.db.prismic import DocumentNotFound
from app.repos.posts_repo import PrismicPostsRepo
from app.schemas.blog import PostView, StaticPath
from app.services.page_cache import PageCache, page_cache
from app.services.post_assembler import PostAssembler
from app.settings import settings

logger = logging.getLogger(__name__)


class PostsService:
    def __init__(
        self,
        repo: PrismicPostsRepo,
        assembler: PostAssembler,
        cache: PageCache = page_cache,
        static_paths_page_size: int = settings.STATIC_PATHS_PAGE_SIZE,
    ):
        self.repo = repo
        self.assembler = assembler
        self.cache = cache
        self.static_paths_page_size = static_paths_page_size

    async def get_post_view(
        self, uid: str, preview_token: Optional[str] = None
    ) -> PostView:
        # Drafts are never cached
        if preview_token:
            return await self.assembler.assemble(uid, preview_token)

        entry = self.cache.get(uid)
        if entry is None:
            logger.info(f"No cached page for {uid}, generating on demand")
            view = await self.assembler.assemble(uid)
            self.cache.put(uid, view)
            return view

        if self.cache.is_stale(entry):
            self.cache.schedule_refresh(uid, self.regenerate)
        return entry.view

    async def regenerate(self, uid: str) -> None:
        """Rebuild a cached page; on failure the previous page keeps being served."""
        try:
            view = await self.assembler.assemble(uid)
        except DocumentNotFound:
            logger.info(f"Post {uid} no longer exists, dropping cached page")
            self.cache.invalidate(uid)
        except Exception as e:
            logger.warning(f"Regeneration failed for {uid}, keeping stale page: {e}")
        else:
            self.cache.put(uid, view)
            logger.info(f"Regenerated page for {uid}")

    async def list_static_paths(self) -> List[StaticPath]:
        uids = await self.repo.list_static_uids(self.static_paths_page_size)
        return [StaticPath(uid=uid) for uid in uids]

    async def resolve_preview(self, document_id: str, token: str) -> str:
        return await self.repo.resolve_preview_uid(document_id, token)

    def revalidate(self, uid: str) -> bool:
        return self.cache.invalidate(uid)
