"""Application service: Show Reservations use case (query)."""

from __future__ import annotations

from stockledger.application.dto import ReservationLineDTO
from stockledger.domain.service.reservation_manager import ReservationManager


class ShowReservationsHandler:

    def __init__(self, manager: ReservationManager) -> None:
        self._manager = manager

    def handle(self, order_id: str) -> list[ReservationLineDTO]:
        return [
            ReservationLineDTO(
                item_id=item.id,
                item_name=item.item_name,
                unit=item.unit,
                quantity=reservation.quantity,
                reserved_on=reservation.date.date().isoformat(),
            )
            for item, reservation in self._manager.reservations_for(order_id)
        ]
