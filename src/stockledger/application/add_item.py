"""Application service: Add Item use case."""

from __future__ import annotations

from typing import Any

from stockledger.application.dto import InventoryLineDTO
from stockledger.domain.clock import Clock, SystemClock
from stockledger.domain.events import ChangeReason, EventBus, InventoryChanged
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.inventory import InventoryItem, ItemCategory, Specifications
from stockledger.domain.model.value_objects import Money
from stockledger.domain.repository.inventory_repository import InventoryRepository
from stockledger.domain.service.stock_classifier import StockClassifier

ID_PREFIXES = {
    ItemCategory.RAW_MATERIAL: "RM",
    ItemCategory.FINISHED_PRODUCT: "FP",
    ItemCategory.CONSUMABLE: "CN",
    ItemCategory.SPARE_PART: "SP",
}


def parse_category(raw: str) -> ItemCategory:
    try:
        return ItemCategory(raw)
    except ValueError:
        allowed = ", ".join(c.value for c in ItemCategory)
        raise ValidationError(f"Unknown category '{raw}' (expected one of: {allowed})")


class AddItemHandler:

    def __init__(
        self,
        inventory_repo: InventoryRepository,
        classifier: StockClassifier,
        events: EventBus,
        clock: Clock | None = None,
    ) -> None:
        self._inventory_repo = inventory_repo
        self._classifier = classifier
        self._events = events
        self._clock = clock or SystemClock()

    def handle(
        self,
        name: str,
        category: str,
        unit: str = "units",
        current_stock: int = 0,
        min_stock: int = 0,
        max_stock: int = 0,
        cost_per_unit: str = "0",
        production_cost: str | None = None,
        selling_price: str | None = None,
        subcategory: str = "",
        supplier: str = "",
        location: str = "",
        specifications: dict[str, Any] | None = None,
    ) -> InventoryLineDTO:
        """Add a new item to the inventory."""
        item_category = parse_category(category)

        for existing in self._inventory_repo.list_all():
            if existing.item_name.lower() == name.strip().lower():
                raise ValidationError(f"Item '{name}' already exists")

        item = InventoryItem.create(
            item_id=self._next_id(item_category),
            item_name=name,
            category=item_category,
            current_stock=current_stock,
            min_stock=min_stock,
            max_stock=max_stock,
            unit=unit,
            subcategory=subcategory,
            supplier=supplier,
            location=location,
            cost_per_unit=Money.of(cost_per_unit),
            production_cost=Money.of(production_cost) if production_cost is not None else None,
            selling_price=Money.of(selling_price) if selling_price is not None else None,
            specifications=Specifications.from_mapping(specifications),
            status=self._classifier.classify_level(current_stock, min_stock, max_stock),
            last_updated=self._clock.now().date(),
        )
        self._inventory_repo.save(item)
        self._events.publish(InventoryChanged.for_items(ChangeReason.CREATED, [item]))
        return InventoryLineDTO.from_item(item)

    def _next_id(self, category: ItemCategory) -> str:
        prefix = ID_PREFIXES[category]
        numbers = [
            int(item.id.split("-", 1)[1])
            for item in self._inventory_repo.list_all()
            if item.id.startswith(f"{prefix}-") and item.id.split("-", 1)[1].isdigit()
        ]
        return f"{prefix}-{max(numbers, default=0) + 1:04d}"
