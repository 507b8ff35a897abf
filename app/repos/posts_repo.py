import logging
from operator import attrgetter
from typing import List, Optional

from app.db import predicates
from app.db.prismic import PrismicClient
from app.schemas.prismic import PostDocument
from app.settings import settings

logger = logging.getLogger(__name__)

FIRST_PUBLICATION_DATE = "document.first_publication_date"


class PrismicPostsRepo:
    def __init__(
        self,
        client: PrismicClient,
        doc_type: str = settings.POSTS_DOCUMENT_TYPE,
        neighbor_page_size: int = settings.NEIGHBOR_PAGE_SIZE,
    ):
        self.client = client
        self.doc_type = doc_type
        self.neighbor_page_size = neighbor_page_size

    async def get_post(self, uid: str, ref: Optional[str] = None) -> PostDocument:
        return await self.client.get_by_uid(self.doc_type, uid, ref=ref)

    async def get_next_post(self, post: PostDocument) -> Optional[PostDocument]:
        return await self._find_neighbor(post, forward=True)

    async def get_prev_post(self, post: PostDocument) -> Optional[PostDocument]:
        return await self._find_neighbor(post, forward=False)

    async def list_static_uids(self, limit: int) -> List[str]:
        response = await self.client.query(
            [predicates.document_type(self.doc_type)],
            page_size=limit,
            orderings=f"[{FIRST_PUBLICATION_DATE} desc]",
        )
        return [doc.uid for doc in response.results if doc.uid]

    async def resolve_preview_uid(self, document_id: str, ref: str) -> str:
        doc = await self.client.get_by_id(document_id, ref=ref)
        if not doc.uid:
            raise ValueError(f"Previewed document {document_id} has no uid")
        return doc.uid

    async def _find_neighbor(
        self, post: PostDocument, *, forward: bool
    ) -> Optional[PostDocument]:
        """
        Walk the published timeline away from ``post`` and return the adjacent
        document in (first_publication_date, id) order.

        The store only sorts by date, so the scan asks for everything at or beyond
        the post's date and keeps paging until it has seen a strictly later (or
        earlier) date; by then every document sharing the timestamp is in hand.
        """
        published = post.first_publication_date
        if published is None:
            logger.debug(f"Post {post.uid} was never published; no neighbors")
            return None

        millis = predicates.to_epoch_ms(published)
        if forward:
            bound = predicates.date_after(FIRST_PUBLICATION_DATE, millis - 1)
            orderings = f"[{FIRST_PUBLICATION_DATE}]"
        else:
            bound = predicates.date_before(FIRST_PUBLICATION_DATE, millis + 1)
            orderings = f"[{FIRST_PUBLICATION_DATE} desc]"

        candidates: List[PostDocument] = []
        page = 1
        while True:
            response = await self.client.query(
                [predicates.document_type(self.doc_type), bound],
                page_size=self.neighbor_page_size,
                page=page,
                orderings=orderings,
            )
            passed_ties = False
            for doc in response.results:
                if doc.id == post.id or doc.first_publication_date is None:
                    continue
                if doc.first_publication_date != published:
                    passed_ties = True
                if _is_beyond(doc, post, forward):
                    candidates.append(doc)

            if passed_ties or page >= response.total_pages:
                break
            page += 1

        if not candidates:
            return None
        key = attrgetter("timeline_key")
        return min(candidates, key=key) if forward else max(candidates, key=key)


def _is_beyond(doc: PostDocument, post: PostDocument, forward: bool) -> bool:
    if forward:
        return doc.timeline_key > post.timeline_key
    return doc.timeline_key < post.timeline_key
