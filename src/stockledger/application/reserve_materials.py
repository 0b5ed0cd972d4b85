"""Application service: Reserve Materials use case.

Called when a binding advice is approved.  Reserves every material the
order needs, or none of them.
"""

from __future__ import annotations

from stockledger.application.dto import (
    InventoryLineDTO,
    MaterialSpec,
    to_material_lines,
)
from stockledger.domain.events import ChangeReason, EventBus, InventoryChanged
from stockledger.domain.service.reservation_manager import ReservationManager


class ReserveMaterialsHandler:

    def __init__(self, manager: ReservationManager, events: EventBus) -> None:
        self._manager = manager
        self._events = events

    def handle(self, order_id: str, specs: list[MaterialSpec]) -> list[InventoryLineDTO]:
        # Quantities are validated here, before any store access
        lines = to_material_lines(specs)
        updated = self._manager.reserve(order_id, lines)
        self._events.publish(
            InventoryChanged.for_items(ChangeReason.RESERVED, updated, order_id)
        )
        return [InventoryLineDTO.from_item(item) for item in updated]
