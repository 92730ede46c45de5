# jamcamping/utils/urls.py
from __future__ import annotations
from typing import Optional, Sequence, Union
from .. import config

__all__ = [
    "stage_url",
    "stage_index_from_fragment",
    "project_path",
    "shop_path",
    "absolute_url",
]


def stage_url(stage: str) -> str:
    """
    Address-bar form of a stage: the first stage lives at "/", every other
    one at "/#<name>". Mirrors what the client pushes into history.
    """
    if not stage or stage == config.STAGES[0]:
        return "/"
    return f"/#{stage}"


def stage_index_from_fragment(
    fragment: Optional[str],
    stages: Sequence[str] = config.STAGES,
) -> Optional[int]:
    """
    Resolve a location hash ("#vendor", "vendor", "/#vendor") to a stage index.

    Returns None for empty or unknown fragments so callers can leave the
    navigator where it is.
    """
    if not fragment:
        return None
    name = str(fragment).strip()
    if "#" in name:
        name = name.split("#", 1)[1]
    name = name.strip("/").strip().lower()
    if not name:
        return None
    try:
        return list(stages).index(name)
    except ValueError:
        return None


def project_path(project_id: Union[int, str]) -> str:
    return f"/projects/{project_id}"


def shop_path(item_id: Union[int, str]) -> str:
    return f"/shop/{item_id}"


def absolute_url(path: str, base_url: str = config.SITE_BASE_URL) -> str:
    """
    Join a site path onto the base URL.

    "/" maps to the bare base URL, which is how the canonical home page is
    listed in the sitemap.
    """
    base = (base_url or "").rstrip("/")
    if not path or path == "/":
        return base
    if not path.startswith("/"):
        path = "/" + path
    return f"{base}{path}"
