import re
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Prismic emits offsets without a colon ("+0000")
_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")


class RichTextFragment(BaseModel):
    """Opaque structured-text block, passed through untouched to the renderer."""

    model_config = ConfigDict(extra="allow", frozen=True)

    type: str = "paragraph"
    text: str = ""
    spans: List[Any] = Field(default_factory=list)


class ContentBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    heading: Optional[str] = None
    body: List[RichTextFragment] = Field(default_factory=list)


class Banner(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    url: Optional[str] = None


class PostData(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    title: Optional[str] = None
    banner: Banner = Field(default_factory=Banner)
    author: Optional[str] = None
    content: List[ContentBlock] = Field(default_factory=list)


class PostDocument(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    uid: Optional[str] = None
    type: str = "posts"
    first_publication_date: Optional[datetime] = None
    last_publication_date: Optional[datetime] = None
    data: PostData = Field(default_factory=PostData)

    @field_validator("first_publication_date", "last_publication_date", mode="before")
    @classmethod
    def _normalize_offset(cls, value):
        if isinstance(value, str):
            return _COMPACT_OFFSET.sub(r"\1:\2", value)
        return value

    @property
    def timeline_key(self):
        """Position on the publication timeline; ties on date fall back to id."""
        return (self.first_publication_date, self.id)


class SearchResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    page: int = 1
    total_pages: int = 1
    results: List[PostDocument] = Field(default_factory=list)
