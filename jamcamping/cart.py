from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

from loguru import logger
from pydantic import ValidationError

from .catalog import parts_total
from .config import CART_PATH, CartLine, Project
from .constants import BUILD_TYPES


class Cart:
    """
    Project builds the visitor has collected, one line per (project, build type).

    Lines are written to a JSON file after every change, the same way the
    browser client keeps them in local storage. Pass ``path=None`` for a
    purely in-memory cart.
    """

    def __init__(self, path: Optional[Path] = CART_PATH):
        self.path = Path(path) if path is not None else None
        self.lines: List[CartLine] = self._load()

    # ---------------------------
    # Persistence
    # ---------------------------

    def _load(self) -> List[CartLine]:
        if self.path is None or not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
            return [CartLine.model_validate(r) for r in raw]
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.warning("Ignoring unreadable cart at {}: {}", self.path, e)
            return []

    def save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump([line.model_dump() for line in self.lines], f, ensure_ascii=False, indent=2)

    # ---------------------------
    # Operations
    # ---------------------------

    def add(self, project: Project, build_type: str) -> CartLine:
        """
        Add (or refresh) the parts list for one build of ``project``.

        Adding the same build twice replaces the earlier line in place.
        """
        if build_type not in BUILD_TYPES:
            raise ValueError(f"Unknown build type {build_type!r}; expected one of {BUILD_TYPES}")

        parts = project.functional_parts if build_type == "functional" else project.extravagant_parts
        line = CartLine(
            id=f"{project.id}-{build_type}",
            project_id=project.id,
            build_type=build_type,
            title=project.title,
            emoji=project.image,
            total=parts_total(parts),
            parts=list(parts),
        )

        for i, existing in enumerate(self.lines):
            if existing.id == line.id:
                self.lines[i] = line
                break
        else:
            self.lines.append(line)

        self.save()
        logger.info("Added {} ({}) to cart", project.title, build_type.upper())
        return line

    def remove(self, line_id: str) -> bool:
        before = len(self.lines)
        self.lines = [line for line in self.lines if line.id != line_id]
        removed = len(self.lines) != before
        if removed:
            self.save()
        return removed

    def clear(self) -> None:
        self.lines = []
        self.save()

    @property
    def count(self) -> int:
        return len(self.lines)

    @property
    def total(self) -> float:
        return round(sum(line.total for line in self.lines), 2)
