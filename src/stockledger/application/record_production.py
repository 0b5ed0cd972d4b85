"""Application service: Record Production use case.

Adds finished goods coming off a job card to stock, recording the
batch in the product's production history.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from stockledger.application.dto import InventoryLineDTO
from stockledger.domain.events import ChangeReason, EventBus, InventoryChanged
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.inventory import (
    InventoryItem,
    ItemCategory,
    ProductionRecord,
)
from stockledger.domain.model.value_objects import Money, Quantity
from stockledger.domain.service.stock_mutator import StockMutator


class RecordProductionHandler:

    def __init__(self, mutator: StockMutator, events: EventBus) -> None:
        self._mutator = mutator
        self._events = events

    def handle(self, item_id: str, quantity: int, job_card_id: str) -> InventoryLineDTO:
        qty = Quantity(quantity)
        if not job_card_id or not job_card_id.strip():
            raise ValidationError("Job card id is required")

        def record(item: InventoryItem, now: datetime) -> dict[str, Any]:
            if item.category != ItemCategory.FINISHED_PRODUCT:
                raise ValidationError(
                    f"{item.item_name} is not a finished product"
                )
            return {
                "production_history": [
                    *item.production_history,
                    ProductionRecord(
                        date=now,
                        quantity=qty.value,
                        job_card_id=job_card_id,
                        production_cost=item.production_cost or Money.zero(),
                    ),
                ],
            }

        updated = self._mutator.apply_delta(item_id, qty.value, record)
        self._events.publish(InventoryChanged.for_items(ChangeReason.PRODUCED, [updated]))
        return InventoryLineDTO.from_item(updated)
