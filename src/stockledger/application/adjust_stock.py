"""Application service: Adjust Stock use case.

Manual corrections after a stock count.  Write-downs are recorded in
the consumption history as an adjustment or as waste.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from stockledger.application.dto import InventoryLineDTO
from stockledger.domain.events import ChangeReason, EventBus, InventoryChanged
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.inventory import (
    ConsumptionRecord,
    ConsumptionType,
    InventoryItem,
)
from stockledger.domain.service.stock_mutator import StockMutator


class AdjustStockHandler:

    def __init__(self, mutator: StockMutator, events: EventBus) -> None:
        self._mutator = mutator
        self._events = events

    def handle(
        self,
        item_id: str,
        delta: int,
        kind: ConsumptionType = ConsumptionType.ADJUSTMENT,
    ) -> InventoryLineDTO:
        if kind == ConsumptionType.PRODUCTION:
            raise ValidationError(
                "Production consumption is recorded by consuming a reservation"
            )

        def record(item: InventoryItem, now: datetime) -> dict[str, Any]:
            if delta > 0:
                return {}
            return {
                "consumption_history": [
                    *item.consumption_history,
                    ConsumptionRecord(date=now, quantity=-delta, order_id=None, type=kind),
                ],
            }

        updated = self._mutator.apply_delta(item_id, delta, record)
        self._events.publish(InventoryChanged.for_items(ChangeReason.ADJUSTED, [updated]))
        return InventoryLineDTO.from_item(updated)
