import json
import math
import re
from datetime import datetime, timezone

from app.db.predicates import to_epoch_ms
from app.db.prismic import DocumentNotFound, PrismicError, TransientFetchFailure
from app.schemas.blog import PostView
from app.schemas.prismic import PostDocument, SearchResponse

MASTER_REF = "master-ref"

_PREDICATE = re.compile(r"\[(at|date\.after|date\.before)\(([^,]+), (.+)\)\]")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def make_doc(
    doc_id: str,
    uid: str | None = None,
    first: str | None = None,
    last: str | None = None,
    *,
    title: str | None = None,
    paragraphs=(),
    doc_type: str = "posts",
) -> PostDocument:
    """
    Build a posts document shaped like the Prismic search payload.
    Each paragraph becomes its own content block with a single fragment.
    """
    return PostDocument.model_validate(
        {
            "id": doc_id,
            "uid": uid if uid is not None else doc_id,
            "type": doc_type,
            "first_publication_date": first,
            "last_publication_date": last if last is not None else first,
            "data": {
                "title": title or doc_id.title(),
                "banner": {"url": f"https://images.example/{doc_id}.png"},
                "author": "Ada",
                "content": [
                    {
                        "heading": f"Section {i}",
                        "body": [{"type": "paragraph", "text": text, "spans": []}],
                    }
                    for i, text in enumerate(paragraphs)
                ],
            },
        }
    )


def words(count: int) -> str:
    return " ".join(["word"] * count)


class FakePrismicClient:
    """
    In-memory stand-in for PrismicClient.

    Understands the predicates built by app.db.predicates and sorts by
    first_publication_date only, keeping insertion order for ties the way the
    real store falls back to its natural ordering.
    Set fail_on to a substring to make any query containing it raise.
    """

    def __init__(self, docs, revisions=None, fail_on=None):
        self.docs = list(docs)
        self.revisions = revisions or {}
        self.fail_on = fail_on
        self.queries = []

    async def get_master_ref(self) -> str:
        return MASTER_REF

    async def query(
        self, query_predicates, *, ref=None, page_size=20, page=1, orderings=None
    ) -> SearchResponse:
        self.queries.append(
            {
                "predicates": list(query_predicates),
                "ref": ref,
                "page_size": page_size,
                "page": page,
                "orderings": orderings,
            }
        )
        if self.fail_on and any(self.fail_on in p for p in query_predicates):
            raise TransientFetchFailure(f"simulated failure on {self.fail_on}")

        matched = [
            doc
            for doc in self._docs_for(ref)
            if all(_matches(doc, p) for p in query_predicates)
        ]
        if orderings:
            matched = sorted(
                matched,
                key=lambda d: d.first_publication_date or _EPOCH,
                reverse=orderings.endswith(" desc]"),
            )

        total_pages = max(1, math.ceil(len(matched) / page_size))
        start = (page - 1) * page_size
        return SearchResponse(
            page=page,
            total_pages=total_pages,
            results=matched[start : start + page_size],
        )

    async def get_by_uid(self, doc_type, uid, ref=None) -> PostDocument:
        response = await self.query(
            [f'[at(document.type, "{doc_type}")]', f'[at(my.{doc_type}.uid, "{uid}")]'],
            ref=ref,
            page_size=1,
        )
        if not response.results:
            raise DocumentNotFound(uid)
        return response.results[0]

    async def get_by_id(self, doc_id, ref=None) -> PostDocument:
        response = await self.query(
            [f'[at(document.id, "{doc_id}")]'], ref=ref, page_size=1
        )
        if not response.results:
            raise DocumentNotFound(doc_id)
        return response.results[0]

    def _docs_for(self, ref):
        if ref is None or ref == MASTER_REF:
            return self.docs
        if ref not in self.revisions:
            raise PrismicError(f"unknown ref {ref}")
        overrides = {doc.id: doc for doc in self.revisions[ref]}
        merged = [overrides.pop(doc.id, doc) for doc in self.docs]
        return merged + list(overrides.values())


def _matches(doc: PostDocument, predicate: str) -> bool:
    name, path, raw = _PREDICATE.fullmatch(predicate).groups()
    value = json.loads(raw)
    if name == "at":
        if path == "document.type":
            return doc.type == value
        if path == "document.id":
            return doc.id == value
        return doc.uid == value

    if doc.first_publication_date is None:
        return False
    millis = to_epoch_ms(doc.first_publication_date)
    return millis > value if name == "date.after" else millis < value


class FakeAssembler:
    """
    Minimal assembler stand-in for service tests.
    Values in ``views`` may be exceptions, which are raised instead.
    """

    def __init__(self, views=None):
        self.views = dict(views or {})
        self.calls = []

    async def assemble(self, uid, preview_token=None):
        self.calls.append((uid, preview_token))
        result = self.views.get(uid)
        if result is None:
            raise DocumentNotFound(uid)
        if isinstance(result, Exception):
            raise result
        if preview_token:
            return result.model_copy(update={"previewActive": True})
        return result


class FakeRepo:
    def __init__(self, uids=(), preview_uids=None):
        self.uids = list(uids)
        self.preview_uids = preview_uids or {}
        self.limits = []

    async def list_static_uids(self, limit):
        self.limits.append(limit)
        return self.uids[:limit]

    async def resolve_preview_uid(self, document_id, ref):
        if document_id not in self.preview_uids:
            raise DocumentNotFound(document_id)
        return self.preview_uids[document_id]


class FakePostsService:
    """
    Minimal posts service stand-in for router tests.
    """

    def __init__(self, view=None, paths=None, error=None, preview_uid=None):
        self.view = view
        self.paths = paths or []
        self.error = error
        self.preview_uid = preview_uid
        self.calls = []
        self.revalidated = []

    async def get_post_view(self, uid, preview_token=None):
        self.calls.append((uid, preview_token))
        if self.error:
            raise self.error
        return self.view

    async def list_static_paths(self):
        if self.error:
            raise self.error
        return self.paths

    async def resolve_preview(self, document_id, token):
        if self.error:
            raise self.error
        return self.preview_uid

    def revalidate(self, uid):
        self.revalidated.append(uid)
        return True


def make_view(doc: PostDocument, **kwargs) -> PostView:
    return PostView(post=doc, **kwargs)
