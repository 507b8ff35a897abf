from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.schemas.prismic import PostDocument


class PostView(BaseModel):
    model_config = ConfigDict(frozen=True)

    post: PostDocument
    nextPost: Optional[PostDocument] = None
    prevPost: Optional[PostDocument] = None
    wasEdited: bool = False
    readingTimeMinutes: int = 0
    previewActive: bool = False


class StaticPath(BaseModel):
    uid: str
