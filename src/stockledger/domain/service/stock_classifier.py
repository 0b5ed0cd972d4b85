"""Domain service: Stock Classifier.

Derives an advisory status from an item's stock against its thresholds.
The stored ``status`` on an item is a cached copy of this value and may
lag behind; the low-stock queries report both rather than picking one.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.inventory import InventoryItem, StockStatus

_LOW_STATUSES = (StockStatus.LOW, StockStatus.CRITICAL)


@dataclass(frozen=True)
class LowStockEntry:
    item: InventoryItem
    stored_status: StockStatus
    computed_status: StockStatus

    @property
    def diverged(self) -> bool:
        return self.stored_status != self.computed_status


class StockClassifier:

    def __init__(
        self,
        critical_fraction: float = 0.5,
        overstock_fraction: float = 0.9,
    ) -> None:
        if not 0 < critical_fraction <= 1:
            raise ValidationError(
                f"critical_fraction must be in (0, 1], got {critical_fraction}"
            )
        if not 0 < overstock_fraction <= 1:
            raise ValidationError(
                f"overstock_fraction must be in (0, 1], got {overstock_fraction}"
            )
        self._critical_fraction = critical_fraction
        self._overstock_fraction = overstock_fraction

    def classify(self, item: InventoryItem) -> StockStatus:
        return self.classify_level(item.current_stock, item.min_stock, item.max_stock)

    def classify_level(
        self, current_stock: int, min_stock: int, max_stock: int
    ) -> StockStatus:
        if current_stock <= min_stock * self._critical_fraction:
            return StockStatus.CRITICAL
        if current_stock <= min_stock:
            return StockStatus.LOW
        if max_stock > 0 and current_stock >= max_stock * self._overstock_fraction:
            return StockStatus.OVERSTOCKED
        return StockStatus.GOOD

    def is_low(self, item: InventoryItem) -> bool:
        """Low by the numbers, or already flagged low by its stored status."""
        return (
            self.classify(item) in _LOW_STATUSES
            or item.status in _LOW_STATUSES
        )

    def classify_low_stock(self, items: list[InventoryItem]) -> list[InventoryItem]:
        return [item for item in items if self.is_low(item)]

    def low_stock_report(self, items: list[InventoryItem]) -> list[LowStockEntry]:
        return [
            LowStockEntry(
                item=item,
                stored_status=item.status,
                computed_status=self.classify(item),
            )
            for item in self.classify_low_stock(items)
        ]
