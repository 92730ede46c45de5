from __future__ import annotations
"""
As-you-type search over the combined catalog pool.

Scoring is additive literal substring containment per field:

    title contains query        +10
    description contains query   +5
    category contains query      +8

A record that matches nowhere scores 0 and is dropped. Results are sorted
by score with a stable sort (ties keep catalog order: projects before shop
items) and capped at SEARCH_RESULT_MAX overall.

Matching is strict substring containment. There is no typo tolerance, and
the query is never compiled into a pattern, so characters such as "(" or
"*" are matched literally.
"""

import html
from typing import Iterable, List, Sequence

from loguru import logger

from .config import (
    CATEGORY_WEIGHT,
    DESCRIPTION_WEIGHT,
    MIN_QUERY_LENGTH,
    SEARCH_RESULT_MAX,
    SHOP_STAGE,
    STAGES,
    TITLE_WEIGHT,
)
from .normalize import fold
from .search_types import RecordKind, SearchableRecord, SearchResult
from .utils.text_clean import clean_query_text
from .utils.urls import project_path, shop_path, stage_url


def score(query_lower: str, record: SearchableRecord) -> int:
    """
    Relevance of one record for an already lower-cased query.

    Fields are independent, so a record matching all three scores 23.
    A missing category never contributes.
    """
    s = 0
    if query_lower in fold(record.title):
        s += TITLE_WEIGHT
    if query_lower in fold(record.description):
        s += DESCRIPTION_WEIGHT
    if record.category and query_lower in fold(record.category):
        s += CATEGORY_WEIGHT
    return s


def search(
    query: str,
    records: Iterable[SearchableRecord],
    limit: int = SEARCH_RESULT_MAX,
) -> List[SearchResult]:
    """
    Rank ``records`` against ``query``.

    Returns [] for queries shorter than MIN_QUERY_LENGTH after trimming,
    and for an empty pool.
    """
    q = clean_query_text(query)
    if len(q) < MIN_QUERY_LENGTH:
        return []
    q_lower = fold(q)

    results: List[SearchResult] = []
    for record in records:
        s = score(q_lower, record)
        if s > 0:
            results.append(SearchResult(record=record, score=s))

    # list.sort is stable, so equal scores keep encounter order
    results.sort(key=lambda r: r.score, reverse=True)
    return results[: max(0, limit)]


def find_spans(text: str, query: str) -> List[tuple]:
    """
    Case-insensitive literal occurrences of ``query`` in ``text``.

    Returns non-overlapping (start, end) offsets into the original text.
    Comparison is done window by window so case mappings that change string
    length can't shift the offsets.
    """
    if not text or not query:
        return []
    q_lower = fold(query)
    n = len(query)
    spans = []
    i = 0
    while i <= len(text) - n:
        if fold(text[i : i + n]) == q_lower:
            spans.append((i, i + n))
            i += n
        else:
            i += 1
    return spans


def highlight(text: str, query: str) -> str:
    """
    HTML-escape ``text`` and wrap each match of ``query`` in <mark>.

    Safe for any query string: the query is only ever compared, never
    interpreted.
    """
    text = text or ""
    q = clean_query_text(query)
    spans = find_spans(text, q) if len(q) >= MIN_QUERY_LENGTH else []
    if not spans:
        return html.escape(text)

    out = []
    pos = 0
    for start, end in spans:
        out.append(html.escape(text[pos:start]))
        out.append("<mark>" + html.escape(text[start:end]) + "</mark>")
        pos = end
    out.append(html.escape(text[pos:]))
    return "".join(out)


def route_for(record: SearchableRecord) -> str:
    """Where opening a result leads: the project page or the shop item page."""
    if record.kind == RecordKind.PROJECT:
        return project_path(record.identifier)
    return shop_path(record.identifier)


def app_route_for(record: SearchableRecord) -> str:
    """
    Where the single-page client goes on selecting a result: projects open
    as a modal over the main stage, shop items switch to the vendor stage.
    """
    if record.kind == RecordKind.PROJECT:
        return stage_url(STAGES[0])
    return stage_url(SHOP_STAGE)


class CatalogSearcher:
    """
    Search bound to one catalog snapshot.

    The record pool is taken at construction and never mutated.
    """

    def __init__(self, records: Sequence[SearchableRecord], limit: int = SEARCH_RESULT_MAX):
        self._records = tuple(records)
        self.limit = limit
        logger.debug("Search pool ready with {} records", len(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def search(self, query: str) -> List[SearchResult]:
        return search(query, self._records, limit=self.limit)
