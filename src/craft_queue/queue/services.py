"""Use-case services for adding recipes to the work queue."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from craft_queue.queue.models import MaterialOverride, WorkItem
from craft_queue.queue.work_queue import WorkQueue
from craft_queue.recipes import RecipeCatalog, is_placeholder_name
from craft_queue.selection import NO_SELECTION, SelectionMonitor

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EnqueueRecipe:
    """High-level command to add one recipe to the queue."""

    recipe_id: int
    quantity: int = 1
    name: str | None = None
    materials: Sequence[MaterialOverride] | None = None


class QueueService:
    """Resolves recipe metadata and appends items to the queue."""

    def __init__(self, *, queue: WorkQueue, catalog: RecipeCatalog) -> None:
        self.queue = queue
        self.catalog = catalog

    def enqueue_recipe(self, command: EnqueueRecipe) -> WorkItem:
        if command.recipe_id <= 0:
            raise ValueError(f"Recipe id must be positive, got {command.recipe_id}.")

        name = command.name or ""
        if is_placeholder_name(name):
            name = self.catalog.resolve_display_name(command.recipe_id)
        materials = (
            tuple(command.materials)
            if command.materials is not None
            else self._default_materials(command.recipe_id)
        )

        item_id = self.queue.add(command.recipe_id, name, command.quantity, materials)
        item = self.queue.by_id(item_id)
        if item is None:
            raise RuntimeError(f"Work item {item_id} vanished right after insert.")
        logger.info(
            "Added %dx %s (recipe %d) to queue",
            item.quantity,
            item.display_name,
            item.recipe_id,
        )
        return item

    def enqueue_selection(self, selection: SelectionMonitor, quantity: int = 1) -> WorkItem:
        """Add whatever recipe is currently selected in the crafting log."""

        if not selection.is_log_open:
            raise ValueError("Open the crafting log to add items.")
        if selection.selected_recipe_id == NO_SELECTION:
            raise ValueError("Select a recipe in the crafting log.")
        return self.enqueue_recipe(
            EnqueueRecipe(recipe_id=selection.selected_recipe_id, quantity=quantity),
        )

    def _default_materials(self, recipe_id: int) -> tuple[MaterialOverride, ...]:
        """Every ingredient defaults to low grade for its full amount."""

        return tuple(
            MaterialOverride(
                material_id=material.material_id,
                name=material.name,
                low_grade_count=material.amount,
                high_grade_count=0,
            )
            for material in self.catalog.resolve_materials(recipe_id)
            if material.amount > 0
        )
