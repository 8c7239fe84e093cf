"""Consumer for crafting-log lifecycle and recipe-selection events."""

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

NO_SELECTION = 0


class SelectionMonitor:
    """Tracks whether the crafting log is open and which recipe is selected.

    The host feeds raw events in; listeners only hear about real changes.
    Recipe id ``0`` means nothing is selected and is never announced.
    """

    def __init__(self) -> None:
        self.is_log_open = False
        self.selected_recipe_id = NO_SELECTION
        self._opened_listeners: list[Callable[[], None]] = []
        self._closed_listeners: list[Callable[[], None]] = []
        self._recipe_listeners: list[Callable[[int], None]] = []

    def on_opened(self, listener: Callable[[], None]) -> None:
        self._opened_listeners.append(listener)

    def on_closed(self, listener: Callable[[], None]) -> None:
        self._closed_listeners.append(listener)

    def on_recipe_changed(self, listener: Callable[[int], None]) -> None:
        self._recipe_listeners.append(listener)

    def opened(self) -> None:
        self.is_log_open = True
        logger.debug("Crafting log opened")
        for listener in list(self._opened_listeners):
            listener()

    def closed(self) -> None:
        self.is_log_open = False
        self.selected_recipe_id = NO_SELECTION
        logger.debug("Crafting log closed")
        for listener in list(self._closed_listeners):
            listener()

    def recipe_changed(self, recipe_id: int) -> None:
        if recipe_id == self.selected_recipe_id:
            return
        self.selected_recipe_id = recipe_id
        if recipe_id == NO_SELECTION:
            return
        logger.debug("Selected recipe changed to %d", recipe_id)
        for listener in list(self._recipe_listeners):
            listener(recipe_id)
