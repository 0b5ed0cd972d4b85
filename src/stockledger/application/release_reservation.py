"""Application service: Release Reservation use case.

Called when a binding advice is cancelled.  Safe to repeat: an order
with nothing left reserved releases nothing and publishes no event.
"""

from __future__ import annotations

from stockledger.application.dto import InventoryLineDTO
from stockledger.domain.events import ChangeReason, EventBus, InventoryChanged
from stockledger.domain.service.reservation_manager import ReservationManager


class ReleaseReservationHandler:

    def __init__(self, manager: ReservationManager, events: EventBus) -> None:
        self._manager = manager
        self._events = events

    def handle(self, order_id: str) -> list[InventoryLineDTO]:
        updated = self._manager.release(order_id)
        if updated:
            self._events.publish(
                InventoryChanged.for_items(ChangeReason.RELEASED, updated, order_id)
            )
        return [InventoryLineDTO.from_item(item) for item in updated]
