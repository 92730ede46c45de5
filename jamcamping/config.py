from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field


# ---------------------------
# Paths
# ---------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DATA_DIR = Path(os.getenv("JAMCAMPING_DATA_DIR", str(PROJECT_ROOT / "data")))
PROJECTS_FILENAME = "projects.json"
SHOP_FILENAME = "shop.json"

SITE_DIR = PROJECT_ROOT / "site"
TEMPLATE_PATH = Path(os.getenv("JAMCAMPING_TEMPLATE", str(SITE_DIR / "index.html")))
DIST_DIR = Path(os.getenv("JAMCAMPING_DIST_DIR", str(PROJECT_ROOT / "dist")))

# Stands in for the browser's localStorage key "jamcamping-cart"
CART_PATH = Path(os.getenv("JAMCAMPING_CART_PATH", str(PROJECT_ROOT / ".jamcamping-cart.json")))


# ---------------------------
# Site
# ---------------------------

SITE_NAME = "JamCamping"
SITE_BASE_URL = os.getenv("SITE_BASE_URL", "https://jamcamping.com").rstrip("/")
SITE_TAGLINE = "Digital Shakedown Street for festival DIY projects"
PRICE_CURRENCY = "USD"


# ---------------------------
# Search
# ---------------------------

TITLE_WEIGHT = 10
DESCRIPTION_WEIGHT = 5
CATEGORY_WEIGHT = 8

MIN_QUERY_LENGTH = 2      # shorter queries are too noisy for as-you-type search
SEARCH_RESULT_MAX = 10    # projects + shop combined, not per kind
MAX_QUERY_CHARS = 200


# ---------------------------
# Stage navigation
# ---------------------------

STAGES: List[str] = ["main", "vendor", "chill", "submit", "contact"]
SHOP_STAGE = "vendor"

DEFAULT_TRANSITION_MS = 600
STAGE_TRANSITION_MS = int(os.getenv("STAGE_TRANSITION_MS", str(DEFAULT_TRANSITION_MS)))

SWIPE_DISTANCE_THRESHOLD_PX = 50.0
SWIPE_VELOCITY_THRESHOLD = 0.3   # px per ms
BOUNDARY_DAMPENING = 0.3         # rubber-band factor past first/last stage
DEFAULT_VIEWPORT_WIDTH = 390.0   # px, only used when the caller doesn't pass one


# ---------------------------
# Catalog fetch / HTTP hardening
# ---------------------------

HTTP_CONNECT_TIMEOUT = 3.0
HTTP_READ_TIMEOUT = 7.0
HTTP_MAX_REDIRECTS = 2
HTTP_MAX_BYTES = 1_000_000  # 1 MB cap per fixture

HTTP_USER_AGENT = "jamcamping-catalog/1.0 (+https://jamcamping.com)"


# ---------------------------
# Pydantic models shared around the app
# ---------------------------

class Part(BaseModel):
    """One line of a build's parts list."""

    item: str
    price: float = Field(ge=0)
    quantity: int = Field(default=1, ge=0)


class Project(BaseModel):
    """
    Canonical schema for a DIY project card.
    Field names are the snake_case forms produced by the catalog loader.
    """

    id: int
    title: str
    description: str = ""
    category: str = ""
    difficulty: str = ""
    build_time: str = ""
    problem_solved: str = ""
    instructions: str = ""
    image: str = ""
    lyric_easter_egg: Optional[str] = None
    functional_parts: List[Part] = Field(default_factory=list)
    extravagant_parts: List[Part] = Field(default_factory=list)


class ShopFormat(BaseModel):
    format: str
    price: float = Field(ge=0)
    buy_url: str = ""
    shipping: bool = False


class ShopItem(BaseModel):
    """
    A guide or book sold on the vendor stage.
    Shop items usually carry no category.
    """

    id: str
    title: str
    description: str = ""
    cover: str = ""
    category: Optional[str] = None
    digital: List[ShopFormat] = Field(default_factory=list)
    print_formats: List[ShopFormat] = Field(default_factory=list)


class CartLine(BaseModel):
    id: str
    project_id: int
    build_type: str
    title: str
    emoji: str = ""
    total: float = Field(ge=0)
    parts: List[Part] = Field(default_factory=list)


class SearchHit(BaseModel):
    """
    Response row for GET /api/search.
    The *_html fields are escaped and carry <mark> spans around matches.
    ``url`` is the record's static page; ``app_url`` is the stage the
    single-page client opens it on.
    """

    kind: str
    id: str
    title: str
    description: str
    score: int = Field(ge=0)
    url: str
    app_url: str
    title_html: str
    description_html: str


class SearchResponse(BaseModel):
    query: str
    results: List[SearchHit]
    hints: List[str] = Field(default_factory=list)


class StageInfo(BaseModel):
    index: int
    name: str
    url: str
    title: str
    description: str


class InspirationResponse(BaseModel):
    quote: str


class Surprise(BaseModel):
    """
    One "surprise me" pick. Exactly one of project / quote / stage is set,
    matching ``kind``. ``url`` is where the client should land, or None
    when the pick is shown in place (a quote).
    """

    kind: str
    url: Optional[str] = None
    project: Optional[Project] = None
    quote: Optional[str] = None
    stage: Optional[str] = None


class HealthResponse(BaseModel):
    """
    Response body for GET /health.
    """

    status: str
