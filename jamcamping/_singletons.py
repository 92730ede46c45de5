# jamcamping/_singletons.py
from functools import lru_cache
from .catalog import Catalog, load_catalog
from .config import DATA_DIR
from .search import CatalogSearcher

@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    return load_catalog(DATA_DIR)

@lru_cache(maxsize=1)
def get_searcher() -> CatalogSearcher:
    return CatalogSearcher(get_catalog().search_records())

def reset_caches() -> None:
    get_searcher.cache_clear()
    get_catalog.cache_clear()
