"""Application service: Show Low Stock use case (query).

Lists items that need replenishing.  Each line shows the status stored
on the item next to the one derived from its current numbers, so a
stale stored status is visible instead of silently corrected.
"""

from __future__ import annotations

from stockledger.application.dto import LowStockLineDTO
from stockledger.application.query_cache import LOW_STOCK, InventoryQueryCache
from stockledger.domain.repository.inventory_repository import InventoryRepository
from stockledger.domain.service.stock_classifier import StockClassifier


class ShowLowStockHandler:

    def __init__(
        self,
        inventory_repo: InventoryRepository,
        classifier: StockClassifier,
        cache: InventoryQueryCache,
    ) -> None:
        self._inventory_repo = inventory_repo
        self._classifier = classifier
        self._cache = cache

    def handle(self) -> list[LowStockLineDTO]:
        return self._cache.get_or_load(LOW_STOCK, self._load)

    def _load(self) -> list[LowStockLineDTO]:
        report = self._classifier.low_stock_report(self._inventory_repo.list_all())
        return [
            LowStockLineDTO(
                item_id=entry.item.id,
                item_name=entry.item.item_name,
                current_stock=entry.item.current_stock,
                min_stock=entry.item.min_stock,
                stored_status=entry.stored_status.value,
                computed_status=entry.computed_status.value,
                diverged=entry.diverged,
            )
            for entry in report
        ]
