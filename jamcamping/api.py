from __future__ import annotations

"""
FastAPI preview server for the catalog.

- JSON endpoints for search, project/shop listings and stage metadata
- Serves the built static site from DIST_DIR when it exists
- Catalog is loaded once per process and shared read-only
"""

from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger

from . import config
from ._singletons import get_catalog, get_searcher
from .catalog import filter_projects, random_inspiration, random_project, surprise
from .config import (
    HealthResponse,
    InspirationResponse,
    Project,
    SearchResponse,
    ShopItem,
    StageInfo,
    Surprise,
)
from .mapping import map_results_to_response, stage_infos


app = FastAPI(title="JamCamping catalog")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup_event() -> None:
    logger.info("Starting app warmup...")
    catalog = get_catalog()
    searcher = get_searcher()
    logger.info(
        "Catalog ready: {} projects, {} shop items, {} searchable records",
        len(catalog.projects),
        len(catalog.shop_items),
        len(searcher),
    )
    logger.info("Warmup complete.")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="healthy")


@app.get("/api/search", response_model=SearchResponse)
def search_endpoint(q: str = Query("", max_length=config.MAX_QUERY_CHARS)) -> SearchResponse:
    results = get_searcher().search(q)
    return map_results_to_response(q, results)


@app.get("/api/projects", response_model=List[Project])
def list_projects(
    category: Optional[str] = Query("all"),
    difficulty: Optional[str] = Query("all"),
) -> List[Project]:
    return filter_projects(get_catalog().projects, category, difficulty)


@app.get("/api/projects/random", response_model=Project)
def get_random_project() -> Project:
    project = random_project(get_catalog().projects)
    if project is None:
        raise HTTPException(status_code=404, detail="No projects loaded")
    return project


@app.get("/api/projects/{project_id}", response_model=Project)
def get_project(project_id: int) -> Project:
    project = get_catalog().project_by_id(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail=f"Project {project_id} not found")
    return project


@app.get("/api/inspiration", response_model=InspirationResponse)
def get_inspiration() -> InspirationResponse:
    return InspirationResponse(quote=random_inspiration())


@app.get("/api/surprise", response_model=Surprise)
def get_surprise() -> Surprise:
    return surprise(get_catalog().projects, config.STAGES)


@app.get("/api/shop", response_model=List[ShopItem])
def list_shop_items() -> List[ShopItem]:
    return get_catalog().shop_items


@app.get("/api/stages", response_model=List[StageInfo])
def list_stages() -> List[StageInfo]:
    return stage_infos(config.STAGES)


if config.DIST_DIR.is_dir():
    app.mount("/", StaticFiles(directory=config.DIST_DIR, html=True), name="site")


# -----------------------
# CLI convenience
# -----------------------

def main() -> None:
    import uvicorn

    uvicorn.run("jamcamping.api:app", host="127.0.0.1", port=3000)


if __name__ == "__main__":
    main()
