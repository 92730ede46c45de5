from __future__ import annotations

import json
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar, Union

import httpx
import pandas as pd
from loguru import logger
from pydantic import BaseModel, ValidationError

from .config import (
    DATA_DIR,
    HTTP_CONNECT_TIMEOUT,
    HTTP_MAX_BYTES,
    HTTP_MAX_REDIRECTS,
    HTTP_READ_TIMEOUT,
    HTTP_USER_AGENT,
    PROJECTS_FILENAME,
    SHOP_FILENAME,
    STAGES,
    Part,
    Project,
    ShopItem,
    Surprise,
)
from .constants import CATEGORY_LABELS, DIFFICULTY_LABELS, INSPIRATIONS, SURPRISE_KINDS
from .normalize import basic_clean
from .search_types import RecordKind, SearchableRecord
from .utils.urls import project_path, stage_url

ModelT = TypeVar("ModelT", bound=BaseModel)


# ---------------------------
# Column detection / standardization
# ---------------------------

# Fixtures are hand-edited JSON written for the browser client, so keys come
# in camelCase and a few legacy spellings.
PROJECT_COLUMN_CANDIDATES: Dict[str, List[str]] = {
    "id": ["id", "project_id", "projectId"],
    "title": ["title", "name", "Title"],
    "description": ["description", "Description", "summary"],
    "category": ["category", "Category"],
    "difficulty": ["difficulty", "Difficulty", "level"],
    "build_time": ["buildTime", "build_time", "time"],
    "problem_solved": ["problemSolved", "problem_solved", "problem"],
    "instructions": ["instructions", "Instructions", "steps"],
    "image": ["image", "emoji", "icon"],
    "lyric_easter_egg": ["lyricEasterEgg", "lyric_easter_egg", "lyric"],
    "functional_parts": ["functionalParts", "functional_parts", "gaParts"],
    "extravagant_parts": ["extravagantParts", "extravagant_parts", "vipParts"],
}

SHOP_COLUMN_CANDIDATES: Dict[str, List[str]] = {
    "id": ["id", "item_id", "itemId", "slug"],
    "title": ["title", "name", "Title"],
    "description": ["description", "Description", "summary"],
    "cover": ["cover", "image", "coverUrl"],
    "category": ["category", "Category"],
    "digital": ["digital", "digitalFormats"],
    "print_formats": ["print", "print_formats", "printFormats"],
}

PROJECT_TEXT_COLUMNS = ["title", "description", "build_time", "problem_solved", "instructions", "image"]
PROJECT_LIST_COLUMNS = ["functional_parts", "extravagant_parts"]
SHOP_TEXT_COLUMNS = ["title", "description", "cover"]
SHOP_LIST_COLUMNS = ["digital", "print_formats"]


def _standardize_columns(df: pd.DataFrame, candidates: Dict[str, List[str]]) -> pd.DataFrame:
    """
    Rename fixture keys to the canonical snake_case schema.
    Unknown keys are kept and ignored later by the models.
    """
    col_map: Dict[str, str] = {}
    lower_to_original = {str(c).lower(): c for c in df.columns}

    for canon, options in candidates.items():
        for candidate in options:
            if candidate in df.columns:
                col_map[candidate] = canon
                break
            cand_lower = candidate.lower()
            if cand_lower in lower_to_original:
                col_map[lower_to_original[cand_lower]] = canon
                break

    logger.debug("Standardizing columns with map: {}", col_map)
    return df.rename(columns=col_map)


def _ensure_list_column(df: pd.DataFrame, col: str) -> None:
    if col not in df.columns:
        df[col] = [[] for _ in range(len(df))]
        return
    df[col] = df[col].apply(lambda v: v if isinstance(v, list) else [])


def _is_missing(value: Any) -> bool:
    if isinstance(value, (list, dict)):
        return False
    return value is None or bool(pd.isna(value))


def _ensure_optional_text(df: pd.DataFrame, col: str, lower: bool = False) -> None:
    """
    Clean an optional text column; missing or blank values become None.

    Built as an explicit object Series so newer pandas can't re-infer a
    string dtype and turn the None values back into NaN.
    """
    values = df[col].tolist() if col in df.columns else [None] * len(df)
    out: List[Optional[str]] = []
    for v in values:
        text = None if _is_missing(v) else (basic_clean(v) or None)
        if text is not None and lower:
            text = text.lower()
        out.append(text)
    df[col] = pd.Series(out, index=df.index, dtype=object)


def _clean_text_columns(df: pd.DataFrame, cols: List[str]) -> None:
    for col in cols:
        if col not in df.columns:
            df[col] = ""
        df[col] = df[col].fillna("").astype(str).apply(basic_clean)


def _empty_frame(candidates: Dict[str, List[str]]) -> pd.DataFrame:
    return pd.DataFrame(columns=list(candidates.keys()))


# ---------------------------
# Fixture normalization
# ---------------------------

def normalize_projects_df(df_raw: pd.DataFrame) -> pd.DataFrame:
    """
    Normalization pipeline for projects.json rows.

    Output columns follow PROJECT_COLUMN_CANDIDATES: integer ids, cleaned
    text, lower-cased category/difficulty tags, list-valued part columns and
    None for a missing lyric.
    """
    logger.info("Normalizing {} raw project rows", len(df_raw))
    df = _standardize_columns(df_raw.copy(), PROJECT_COLUMN_CANDIDATES)

    if "id" not in df.columns or "title" not in df.columns:
        logger.error("Project fixture has no id/title keys; resulting project list will be empty.")
        return _empty_frame(PROJECT_COLUMN_CANDIDATES)

    df["id"] = pd.to_numeric(df["id"], errors="coerce")
    dropped = int(df["id"].isna().sum())
    if dropped:
        logger.warning("Dropping {} project rows with a non-numeric id", dropped)
    df = df[df["id"].notna()].copy()
    df["id"] = df["id"].astype(int)

    _clean_text_columns(df, PROJECT_TEXT_COLUMNS)
    df = df[df["title"] != ""]
    df = df.drop_duplicates(subset=["id"]).reset_index(drop=True)

    for col in ("category", "difficulty"):
        if col not in df.columns:
            df[col] = ""
        df[col] = df[col].fillna("").astype(str).str.strip().str.lower()

    _ensure_optional_text(df, "lyric_easter_egg")
    for col in PROJECT_LIST_COLUMNS:
        _ensure_list_column(df, col)

    logger.info("Project normalization complete. Final rows: {}", len(df))
    return df[list(PROJECT_COLUMN_CANDIDATES.keys())]


def normalize_shop_df(df_raw: pd.DataFrame) -> pd.DataFrame:
    """
    Normalization pipeline for shop.json rows.

    Shop ids stay strings; category is optional and becomes None when absent.
    """
    logger.info("Normalizing {} raw shop rows", len(df_raw))
    df = _standardize_columns(df_raw.copy(), SHOP_COLUMN_CANDIDATES)

    if "id" not in df.columns or "title" not in df.columns:
        logger.error("Shop fixture has no id/title keys; resulting shop list will be empty.")
        return _empty_frame(SHOP_COLUMN_CANDIDATES)

    df = df[df["id"].notna()].copy()
    df["id"] = df["id"].astype(str).str.strip()
    df = df[df["id"] != ""]

    _clean_text_columns(df, SHOP_TEXT_COLUMNS)
    df = df[df["title"] != ""]
    df = df.drop_duplicates(subset=["id"]).reset_index(drop=True)

    _ensure_optional_text(df, "category", lower=True)
    for col in SHOP_LIST_COLUMNS:
        _ensure_list_column(df, col)

    logger.info("Shop normalization complete. Final rows: {}", len(df))
    return df[list(SHOP_COLUMN_CANDIDATES.keys())]


def _rows_to_models(df: pd.DataFrame, model: Type[ModelT]) -> List[ModelT]:
    out: List[ModelT] = []
    for row in df.to_dict(orient="records"):
        row = {k: (None if _is_missing(v) else v) for k, v in row.items()}
        try:
            out.append(model.model_validate(row))
        except ValidationError as e:
            logger.warning("Skipping invalid {} row {}: {}", model.__name__, row.get("id"), e)
    return out


# ---------------------------
# IO helpers
# ---------------------------

def _is_url(source: Union[str, Path]) -> bool:
    return str(source).startswith(("http://", "https://"))


def _fetch_json(url: str) -> Any:
    headers = {"User-Agent": HTTP_USER_AGENT}
    with httpx.Client(
        follow_redirects=True,
        timeout=httpx.Timeout(HTTP_READ_TIMEOUT, connect=HTTP_CONNECT_TIMEOUT),
        max_redirects=HTTP_MAX_REDIRECTS,
    ) as client:
        logger.info("Fetching catalog fixture: {}", url)
        r = client.get(url, headers=headers)
        if r.status_code >= 400:
            raise RuntimeError(f"HTTP {r.status_code} for {url}")
        if len(r.content) > HTTP_MAX_BYTES:
            raise RuntimeError(f"Fixture too large ({len(r.content)} bytes) for {url}")
        return r.json()


def read_fixture(source: Union[str, Path]) -> pd.DataFrame:
    """
    Load one JSON fixture (a top-level array of objects) into a DataFrame.

    ``source`` is a local path or an http(s) URL.
    """
    if _is_url(source):
        raw = _fetch_json(str(source))
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Catalog fixture not found: {path}")
        logger.info("Loading catalog fixture from {}", path)
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError(f"Expected a JSON array in {source}, got {type(raw).__name__}")
    rows = [r for r in raw if isinstance(r, dict)]
    if len(rows) != len(raw):
        logger.warning("Ignoring {} non-object entries in {}", len(raw) - len(rows), source)
    return pd.DataFrame.from_records(rows)


def _fixture_location(source: Union[str, Path], filename: str) -> Union[str, Path]:
    if _is_url(source):
        return f"{str(source).rstrip('/')}/{filename}"
    return Path(source) / filename


# ---------------------------
# Catalog container
# ---------------------------

@dataclass
class Catalog:
    """The two fixtures, loaded once and shared read-only."""

    projects: List[Project] = field(default_factory=list)
    shop_items: List[ShopItem] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.projects and not self.shop_items

    def project_by_id(self, project_id: Union[int, str]) -> Optional[Project]:
        try:
            pid = int(project_id)
        except (TypeError, ValueError):
            return None
        return next((p for p in self.projects if p.id == pid), None)

    def shop_item_by_id(self, item_id: str) -> Optional[ShopItem]:
        return next((s for s in self.shop_items if s.id == str(item_id)), None)

    def search_records(self) -> List[SearchableRecord]:
        return build_search_records(self.projects, self.shop_items)


def load_projects(source: Union[str, Path] = DATA_DIR, strict: bool = False) -> List[Project]:
    location = _fixture_location(source, PROJECTS_FILENAME)
    try:
        df = normalize_projects_df(read_fixture(location))
    except Exception as e:
        if strict:
            raise
        logger.warning("Failed to load projects from {}: {}; using an empty list", location, e)
        return []
    return _rows_to_models(df, Project)


def load_shop_items(source: Union[str, Path] = DATA_DIR, strict: bool = False) -> List[ShopItem]:
    location = _fixture_location(source, SHOP_FILENAME)
    try:
        df = normalize_shop_df(read_fixture(location))
    except Exception as e:
        if strict:
            raise
        logger.warning("Failed to load shop items from {}: {}; using an empty list", location, e)
        return []
    return _rows_to_models(df, ShopItem)


def load_catalog(source: Union[str, Path] = DATA_DIR, strict: bool = False) -> Catalog:
    """
    Load projects.json and shop.json from a directory or base URL.

    With ``strict=False`` (the runtime default) a missing or broken fixture
    degrades to an empty list. The site build passes ``strict=True``.
    """
    catalog = Catalog(
        projects=load_projects(source, strict=strict),
        shop_items=load_shop_items(source, strict=strict),
    )
    logger.info(
        "Loaded {} projects and {} shop items",
        len(catalog.projects),
        len(catalog.shop_items),
    )
    if catalog.is_empty:
        logger.warning("Catalog is empty; search will return no results")
    return catalog


# ---------------------------
# Search pool
# ---------------------------

def build_search_records(
    projects: List[Project],
    shop_items: List[ShopItem],
) -> List[SearchableRecord]:
    """Projects first, then shop items; this order is the tie-break order."""
    records: List[SearchableRecord] = []
    for p in projects:
        records.append(
            SearchableRecord(
                identifier=p.id,
                kind=RecordKind.PROJECT,
                title=p.title,
                description=p.description,
                category=p.category or None,
            )
        )
    for s in shop_items:
        records.append(
            SearchableRecord(
                identifier=s.id,
                kind=RecordKind.SHOP_ITEM,
                title=s.title,
                description=s.description,
                category=s.category or None,
            )
        )
    return records


# ---------------------------
# Card helpers
# ---------------------------

def filter_projects(
    projects: List[Project],
    category: Optional[str] = "all",
    difficulty: Optional[str] = "all",
) -> List[Project]:
    """Category/difficulty dropdown filter; "all" (or empty) disables a facet."""
    if not projects:
        return []
    cat = (category or "all").strip().lower()
    diff = (difficulty or "all").strip().lower()

    df = pd.DataFrame(
        {
            "category": [p.category for p in projects],
            "difficulty": [p.difficulty for p in projects],
        }
    )
    mask = pd.Series(True, index=df.index)
    if cat != "all":
        mask &= df["category"] == cat
    if diff != "all":
        mask &= df["difficulty"] == diff
    return [projects[i] for i in df.index[mask]]


def format_category(category: Optional[str]) -> str:
    if not category:
        return ""
    return CATEGORY_LABELS.get(category, category)


def format_difficulty(difficulty: Optional[str]) -> str:
    if not difficulty:
        return ""
    return DIFFICULTY_LABELS.get(difficulty, difficulty)


def parts_total(parts: List[Part]) -> float:
    return round(sum(part.price * part.quantity for part in parts), 2)


def functional_total(project: Project) -> float:
    return parts_total(project.functional_parts)


def extravagant_total(project: Project) -> float:
    return parts_total(project.extravagant_parts)


# ---------------------------
# "Surprise me" picks
# ---------------------------

def random_project(
    projects: Sequence[Project],
    rng: Optional[random.Random] = None,
) -> Optional[Project]:
    """Uniform pick from the project list; None when there is nothing to pick."""
    if not projects:
        return None
    return (rng or random).choice(list(projects))


def random_inspiration(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(INSPIRATIONS)


def surprise(
    projects: Sequence[Project],
    stages: Sequence[str] = STAGES,
    rng: Optional[random.Random] = None,
) -> Surprise:
    """
    Pick one of: a random project, an inspiration quote, or a random stage.

    The project option is only offered when there are projects, and the
    stage option only when there are stages, so a quote is always possible.
    """
    r = rng or random
    kinds = [
        k for k in SURPRISE_KINDS
        if not (k == "project" and not projects) and not (k == "stage" and not stages)
    ]
    kind = r.choice(kinds)

    if kind == "project":
        project = random_project(projects, r)
        return Surprise(kind=kind, url=project_path(project.id), project=project)
    if kind == "stage":
        stage = r.choice(list(stages))
        return Surprise(kind=kind, url=stage_url(stage), stage=stage)
    return Surprise(kind=kind, quote=random_inspiration(r))
