"""Recipe metadata lookup used when adding items to the queue."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = "Recipe #"


@dataclass(frozen=True, slots=True)
class RecipeMaterial:
    """One ingredient line of a recipe."""

    material_id: int
    name: str
    amount: int


class RecipeCatalog(Protocol):
    """Protocol implemented by recipe metadata sources."""

    def resolve_display_name(self, recipe_id: int) -> str:
        """Return a human label, or a placeholder when unknown."""

    def resolve_materials(self, recipe_id: int) -> tuple[RecipeMaterial, ...]:
        """Return ingredient lines, or an empty tuple when unknown."""


def placeholder_name(recipe_id: int) -> str:
    return f"{PLACEHOLDER_PREFIX}{recipe_id}"


def is_placeholder_name(name: str) -> bool:
    return not name.strip() or name.startswith(PLACEHOLDER_PREFIX)


class JsonRecipeCatalog:
    """Recipe catalog loaded from a JSON document.

    Expected shape::

        {"recipes": [{"recipe_id": 1, "name": "Bronze Ingot",
                      "materials": [{"material_id": 5, "name": "Copper Ore", "amount": 3}]}]}

    A missing or malformed file degrades to an empty catalog; lookups then
    return placeholders instead of failing.
    """

    def __init__(self, path: Path | None) -> None:
        self.path = path
        self._names: dict[int, str] = {}
        self._materials: dict[int, tuple[RecipeMaterial, ...]] = {}
        if path is not None:
            self._load(path)

    def __len__(self) -> int:
        return len(self._names)

    def resolve_display_name(self, recipe_id: int) -> str:
        name = self._names.get(recipe_id, "")
        return name or placeholder_name(recipe_id)

    def resolve_materials(self, recipe_id: int) -> tuple[RecipeMaterial, ...]:
        return self._materials.get(recipe_id, ())

    def _load(self, path: Path) -> None:
        try:
            payload = json.loads(path.read_text("utf-8"))
            entries = payload.get("recipes", [])
            for entry in entries:
                self._load_entry(entry)
        except (OSError, ValueError, TypeError, AttributeError, KeyError) as error:
            logger.warning("Recipe catalog %s could not be loaded: %s", path, error)
            self._names.clear()
            self._materials.clear()
            return
        logger.info("Recipe catalog loaded: %d recipes from %s", len(self._names), path)

    def _load_entry(self, entry: dict[str, Any]) -> None:
        recipe_id = int(entry["recipe_id"])
        self._names[recipe_id] = str(entry.get("name", "")).strip()
        materials: list[RecipeMaterial] = []
        for raw in entry.get("materials", []):
            materials.append(
                RecipeMaterial(
                    material_id=int(raw["material_id"]),
                    name=str(raw.get("name", "")),
                    amount=int(raw.get("amount", 0)),
                ),
            )
        self._materials[recipe_id] = tuple(materials)
