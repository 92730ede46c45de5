# jamcamping/utils/text_clean.py
from __future__ import annotations
import re

from ..config import MAX_QUERY_CHARS


def clean_query_text(q: str, max_len: int = MAX_QUERY_CHARS) -> str:
    """
    Query normaliser applied before every search:
    - collapse whitespace/newlines
    - trim
    - hard cap
    """
    q = "" if q is None else str(q)
    q = re.sub(r"\s+", " ", q).strip()
    if len(q) > max_len:
        q = q[:max_len]
    return q
