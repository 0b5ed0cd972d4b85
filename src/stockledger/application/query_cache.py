"""Read-side cache for inventory queries.

Query results are cached per key until a mutation invalidates them.
Invalidation is driven by InventoryChanged events: a change to an item
of category C drops the all-items view, the category C view and the
low-stock view.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from stockledger.domain.events import EventBus, InventoryChanged
from stockledger.domain.model.inventory import ItemCategory
from stockledger.logging_config import get_logger

logger = get_logger("application.query_cache")

T = TypeVar("T")

CacheKey = tuple[str, ...]

ALL_ITEMS: CacheKey = ("all",)
LOW_STOCK: CacheKey = ("low_stock",)


def category_key(category: ItemCategory) -> CacheKey:
    return ("category", category.value)


def keys_invalidated_by(event: InventoryChanged) -> set[CacheKey]:
    keys = {ALL_ITEMS, LOW_STOCK}
    keys.update(category_key(c) for c in event.categories)
    return keys


class InventoryQueryCache:

    def __init__(self) -> None:
        self._entries: dict[CacheKey, Any] = {}

    def attach(self, events: EventBus) -> None:
        events.subscribe(self.on_inventory_changed)

    def get_or_load(self, key: CacheKey, loader: Callable[[], T]) -> T:
        if key in self._entries:
            return self._entries[key]
        value = loader()
        self._entries[key] = value
        return value

    def invalidate(self, key: CacheKey) -> None:
        self._entries.pop(key, None)

    def on_inventory_changed(self, event: InventoryChanged) -> None:
        keys = keys_invalidated_by(event)
        for key in keys:
            self.invalidate(key)
        logger.debug(
            "Invalidated inventory queries",
            extra={"reason": event.reason.value, "keys": sorted(keys)},
        )
