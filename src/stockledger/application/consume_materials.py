"""Application service: Consume Materials use case.

Called when production for an order completes.  Turns the order's
reservations into consumption records without touching stock.
"""

from __future__ import annotations

from stockledger.application.dto import (
    InventoryLineDTO,
    MaterialSpec,
    to_material_lines,
)
from stockledger.domain.events import ChangeReason, EventBus, InventoryChanged
from stockledger.domain.service.consumption_recorder import ConsumptionRecorder


class ConsumeMaterialsHandler:

    def __init__(self, recorder: ConsumptionRecorder, events: EventBus) -> None:
        self._recorder = recorder
        self._events = events

    def handle(self, order_id: str, specs: list[MaterialSpec]) -> list[InventoryLineDTO]:
        lines = to_material_lines(specs)
        updated = self._recorder.consume(order_id, lines)
        self._events.publish(
            InventoryChanged.for_items(ChangeReason.CONSUMED, updated, order_id)
        )
        return [InventoryLineDTO.from_item(item) for item in updated]
