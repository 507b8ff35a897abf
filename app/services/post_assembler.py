import asyncio
import logging
from typing import Optional

from app.db.prismic import DocumentNotFound, PrismicError, TransientFetchFailure
from app.repos.posts_repo import PrismicPostsRepo
from app.schemas.blog import PostView
from app.schemas.prismic import PostDocument
from app.settings import settings
from app.utils import calculate_reading_time, was_edited

logger = logging.getLogger(__name__)


class PostAssembler:
    """
    Builds the view model for a single post page: the document itself, its
    neighbors on the publication timeline and the derived display fields.

    Stateless; every call issues fresh reads and returns a new PostView.
    """

    def __init__(
        self,
        repo: PrismicPostsRepo,
        words_per_minute: int = settings.WORDS_PER_MINUTE,
    ):
        self.repo = repo
        self.words_per_minute = words_per_minute

    async def assemble(self, uid: str, preview_token: Optional[str] = None) -> PostView:
        if not uid:
            raise ValueError("uid must be a non-empty slug")
        preview_token = preview_token or None

        try:
            post = await self.repo.get_post(uid, ref=preview_token)
        except (DocumentNotFound, TransientFetchFailure):
            raise
        except PrismicError as e:
            # expired or unknown refs come back as 4xx
            raise DocumentNotFound(f"Post {uid!r} could not be resolved: {e}") from e

        next_post, prev_post = await asyncio.gather(
            self._neighbor(self.repo.get_next_post, post, "next"),
            self._neighbor(self.repo.get_prev_post, post, "previous"),
        )

        return PostView(
            post=post,
            nextPost=next_post,
            prevPost=prev_post,
            wasEdited=was_edited(
                post.first_publication_date, post.last_publication_date
            ),
            readingTimeMinutes=calculate_reading_time(
                post.data.content, self.words_per_minute
            ),
            previewActive=preview_token is not None,
        )

    @staticmethod
    async def _neighbor(
        lookup, post: PostDocument, label: str
    ) -> Optional[PostDocument]:
        try:
            return await lookup(post)
        except PrismicError as e:
            logger.warning(f"Could not resolve {label} post for {post.uid}: {e}")
            return None
