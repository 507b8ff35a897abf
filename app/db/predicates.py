"""
Builders for the handful of Prismic query predicates the posts pages rely on.
"""

import json
from datetime import datetime
from typing import Iterable


def _literal(value) -> str:
    if isinstance(value, datetime):
        return str(to_epoch_ms(value))
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(str(value))


def to_epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def at(path: str, value) -> str:
    return f"[at({path}, {_literal(value)})]"


def date_after(path: str, value) -> str:
    return f"[date.after({path}, {_literal(value)})]"


def date_before(path: str, value) -> str:
    return f"[date.before({path}, {_literal(value)})]"


def document_type(doc_type: str) -> str:
    return at("document.type", doc_type)


def combine(predicates: Iterable[str]) -> str:
    return "[" + "".join(predicates) + "]"
