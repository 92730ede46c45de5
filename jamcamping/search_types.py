"""Typed containers shared by the catalog loader and the scorer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class RecordKind(str, Enum):
    PROJECT = "project"
    SHOP_ITEM = "shop"


@dataclass(frozen=True)
class SearchableRecord:
    """Read-only view of a catalog entry as the scorer sees it."""

    identifier: Union[int, str]
    kind: RecordKind
    title: str
    description: str
    category: Optional[str] = None


@dataclass(frozen=True)
class SearchResult:
    """A scored record; rank is implied by list position."""

    record: SearchableRecord
    score: int
