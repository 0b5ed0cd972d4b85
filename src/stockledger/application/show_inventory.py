"""Application service: Show Inventory use case (query).

The lines and their total value are cached together, so both are
dropped by the same inventory change.
"""

from __future__ import annotations

from stockledger.application.dto import InventoryLineDTO, InventoryViewDTO
from stockledger.application.query_cache import (
    ALL_ITEMS,
    InventoryQueryCache,
    category_key,
)
from stockledger.domain.model.inventory import ItemCategory
from stockledger.domain.model.value_objects import Money
from stockledger.domain.repository.inventory_repository import InventoryRepository


class ShowInventoryHandler:

    def __init__(
        self, inventory_repo: InventoryRepository, cache: InventoryQueryCache
    ) -> None:
        self._inventory_repo = inventory_repo
        self._cache = cache

    def handle(self, category: ItemCategory | None = None) -> InventoryViewDTO:
        key = ALL_ITEMS if category is None else category_key(category)
        return self._cache.get_or_load(key, lambda: self._load(category))

    def _load(self, category: ItemCategory | None) -> InventoryViewDTO:
        items = [
            item
            for item in self._inventory_repo.list_all()
            if category is None or item.category == category
        ]
        return InventoryViewDTO(
            lines=[InventoryLineDTO.from_item(item) for item in items],
            total_value=str(Money.total([item.stock_value for item in items])),
        )
