import logging
import time
from typing import List, Optional, Sequence

import httpx
from fastapi import Request

from app.db import predicates
from app.schemas.prismic import PostDocument, SearchResponse
from app.settings import Settings, settings

logger = logging.getLogger(__name__)

MASTER_REF_TTL_SECONDS = 5


class PrismicError(Exception):
    """Base error for the content store."""


class DocumentNotFound(PrismicError):
    """A uid or id does not resolve to any document."""


class TransientFetchFailure(PrismicError):
    """Network, timeout or server-side failure; safe to retry later."""


class PrismicClient:
    """
    Narrow async client for the Prismic REST API v2.
    Only covers ref lookup, search and the by-uid / by-id shortcuts.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        endpoint: str,
        access_token: str = "",
        clock=time.monotonic,
    ):
        self.http = http
        self.endpoint = endpoint.rstrip("/")
        self.access_token = access_token
        self._clock = clock
        self._master_ref: Optional[str] = None
        self._master_ref_at = 0.0

    async def aclose(self) -> None:
        await self.http.aclose()

    async def get_master_ref(self) -> str:
        now = self._clock()
        if self._master_ref and now - self._master_ref_at < MASTER_REF_TTL_SECONDS:
            return self._master_ref

        payload = await self._get(self.endpoint, self._with_token([]))
        master = next(
            (r for r in payload.get("refs", []) if r.get("isMasterRef")), None
        )
        if not master:
            raise PrismicError("Prismic API did not advertise a master ref")

        self._master_ref = master["ref"]
        self._master_ref_at = now
        return self._master_ref

    async def query(
        self,
        query_predicates: Sequence[str],
        *,
        ref: Optional[str] = None,
        page_size: int = 20,
        page: int = 1,
        orderings: Optional[str] = None,
    ) -> SearchResponse:
        ref = ref or await self.get_master_ref()
        params = [
            ("ref", ref),
            ("q", predicates.combine(query_predicates)),
            ("pageSize", str(page_size)),
            ("page", str(page)),
        ]
        if orderings:
            params.append(("orderings", orderings))

        payload = await self._get(
            f"{self.endpoint}/documents/search", self._with_token(params)
        )
        return SearchResponse.model_validate(payload)

    async def get_by_uid(
        self, doc_type: str, uid: str, ref: Optional[str] = None
    ) -> PostDocument:
        response = await self.query(
            [
                predicates.document_type(doc_type),
                predicates.at(f"my.{doc_type}.uid", uid),
            ],
            ref=ref,
            page_size=1,
        )
        if not response.results:
            raise DocumentNotFound(f"No {doc_type} document with uid {uid!r}")
        return response.results[0]

    async def get_by_id(self, doc_id: str, ref: Optional[str] = None) -> PostDocument:
        response = await self.query(
            [predicates.at("document.id", doc_id)], ref=ref, page_size=1
        )
        if not response.results:
            raise DocumentNotFound(f"No document with id {doc_id!r}")
        return response.results[0]

    def _with_token(self, params: List[tuple]) -> List[tuple]:
        if self.access_token:
            return [*params, ("access_token", self.access_token)]
        return params

    async def _get(self, url: str, params: List[tuple]) -> dict:
        try:
            response = await self.http.get(url, params=params)
        except httpx.HTTPError as e:
            raise TransientFetchFailure(f"Prismic request failed: {e}") from e

        if response.status_code >= 500:
            raise TransientFetchFailure(
                f"Prismic returned {response.status_code} for {url}"
            )
        if response.status_code >= 400:
            logger.debug(f"Prismic rejected request to {url}: {response.text}")
            raise PrismicError(f"Prismic returned {response.status_code} for {url}")
        return response.json()


def create_prismic_client(settings_obj: Settings = settings) -> PrismicClient:
    """
    Build a client with its own connection pool.
    Called from the app lifespan so nothing connects at import time.
    """
    http = httpx.AsyncClient(
        timeout=httpx.Timeout(settings_obj.PRISMIC_TIMEOUT_SECONDS)
    )
    return PrismicClient(
        http,
        settings_obj.PRISMIC_API_ENDPOINT,
        access_token=settings_obj.PRISMIC_ACCESS_TOKEN,
    )


def get_prismic(request: Request) -> PrismicClient:
    return request.app.state.prismic
