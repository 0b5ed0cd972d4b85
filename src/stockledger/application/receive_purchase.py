"""Application service: Receive Purchase use case.

Credits a delivery from a supplier to stock and records it in the
item's purchase history.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from stockledger.application.dto import InventoryLineDTO
from stockledger.domain.events import ChangeReason, EventBus, InventoryChanged
from stockledger.domain.model.inventory import InventoryItem, PurchaseRecord
from stockledger.domain.model.value_objects import Money, Quantity
from stockledger.domain.service.stock_mutator import StockMutator


class ReceivePurchaseHandler:

    def __init__(self, mutator: StockMutator, events: EventBus) -> None:
        self._mutator = mutator
        self._events = events

    def handle(
        self, item_id: str, quantity: int, rate: str, supplier: str = ""
    ) -> InventoryLineDTO:
        qty = Quantity(quantity)
        price = Money.of(rate)

        def record(item: InventoryItem, now: datetime) -> dict[str, Any]:
            return {
                "purchase_history": [
                    *item.purchase_history,
                    PurchaseRecord(
                        date=now,
                        quantity=qty.value,
                        rate=price,
                        supplier=supplier or item.supplier,
                    ),
                ],
                "cost_per_unit": price,
            }

        updated = self._mutator.apply_delta(item_id, qty.value, record)
        self._events.publish(InventoryChanged.for_items(ChangeReason.PURCHASED, [updated]))
        return InventoryLineDTO.from_item(updated)
