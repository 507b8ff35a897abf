import math
from datetime import datetime
from typing import Iterable, Optional

from app.schemas.prismic import ContentBlock, RichTextFragment


def rich_text_as_text(
    fragments: Iterable[RichTextFragment], separator: str = " "
) -> str:
    return separator.join(fragment.text for fragment in fragments)


def count_words(blocks: Iterable[ContentBlock]) -> int:
    return sum(len(rich_text_as_text(block.body).split()) for block in blocks)


def calculate_reading_time(
    blocks: Iterable[ContentBlock], words_per_minute: int = 200
) -> int:
    return math.ceil(count_words(blocks) / words_per_minute)


def was_edited(first: Optional[datetime], last: Optional[datetime]) -> bool:
    if first is None or last is None:
        return False
    return last > first
