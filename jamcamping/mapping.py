from __future__ import annotations
"""
Mapping utilities to convert internal search and stage state into API responses.

Centralises the conversion from SearchResult / stage names into the Pydantic
schemas (SearchHit / SearchResponse / StageInfo) so the preview server and
any other consumer render the same view model.
"""

from typing import List, Sequence

from .config import STAGES, SEARCH_RESULT_MAX, SearchHit, SearchResponse, StageInfo
from .constants import SEARCH_HINTS, STAGE_META
from .search import app_route_for, highlight, route_for
from .search_types import SearchResult
from .utils.text_clean import clean_query_text
from .utils.urls import stage_url


def _build_search_hit(result: SearchResult, query: str) -> SearchHit:
    record = result.record
    return SearchHit(
        kind=record.kind.value,
        id=str(record.identifier),
        title=record.title,
        description=record.description,
        score=result.score,
        url=route_for(record),
        app_url=app_route_for(record),
        title_html=highlight(record.title, query),
        description_html=highlight(record.description, query),
    )


def map_results_to_response(query: str, results: Sequence[SearchResult]) -> SearchResponse:
    """
    Wrap ranked results for the client.

    An empty result list carries suggestion queries the UI can offer instead.
    """
    q = clean_query_text(query)
    hits: List[SearchHit] = [_build_search_hit(r, q) for r in results[:SEARCH_RESULT_MAX]]
    return SearchResponse(
        query=q,
        results=hits,
        hints=[] if hits else list(SEARCH_HINTS),
    )


def stage_infos(stages: Sequence[str] = STAGES) -> List[StageInfo]:
    out: List[StageInfo] = []
    for i, name in enumerate(stages):
        meta = STAGE_META.get(name, {})
        out.append(
            StageInfo(
                index=i,
                name=name,
                url=stage_url(name),
                title=meta.get("title", name.title()),
                description=meta.get("description", ""),
            )
        )
    return out
