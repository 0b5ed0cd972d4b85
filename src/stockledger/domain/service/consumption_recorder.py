"""Domain service: Consumption Recorder.

Closes out an order's reservations when production completes.  The
stock was already debited at reservation time, so consuming only moves
the entry from the reservation ledger to the consumption history.

A material can only be consumed if the order reserved it, and only in
the quantity it reserved.
"""

from __future__ import annotations

from stockledger.domain.clock import Clock, SystemClock
from stockledger.domain.exceptions import (
    ReservationMismatchError,
    ReservationNotFoundError,
)
from stockledger.domain.model.inventory import (
    ConsumptionRecord,
    ConsumptionType,
    InventoryItem,
)
from stockledger.domain.model.value_objects import MaterialLine
from stockledger.domain.repository.inventory_repository import (
    InventoryRepository,
    ItemUpdate,
)
from stockledger.domain.service.batch_writer import BatchWriter
from stockledger.domain.service.reservation_manager import (
    check_material_request,
    load_items,
)
from stockledger.domain.service.retry import run_with_conflict_retry
from stockledger.logging_config import get_logger

logger = get_logger("domain.consumption_recorder")


class ConsumptionRecorder:

    def __init__(
        self,
        inventory_repo: InventoryRepository,
        clock: Clock | None = None,
        max_conflict_retries: int = 3,
    ) -> None:
        self._inventory_repo = inventory_repo
        self._clock = clock or SystemClock()
        self._writer = BatchWriter(inventory_repo)
        self._max_conflict_retries = max_conflict_retries

    def consume(
        self, order_id: str, materials: list[MaterialLine]
    ) -> list[InventoryItem]:
        check_material_request(order_id, materials)

        def attempt() -> list[InventoryItem]:
            loaded = load_items(self._inventory_repo, materials)
            for item, qty in loaded:
                reservation = item.find_reservation(order_id)
                if reservation is None:
                    raise ReservationNotFoundError(
                        f"Order {order_id} has no reservation on {item.item_name}"
                    )
                if reservation.quantity != qty:
                    raise ReservationMismatchError(
                        f"Order {order_id} reserved {reservation.quantity} of "
                        f"{item.item_name} but is consuming {qty}"
                    )

            now = self._clock.now()
            updates = [
                ItemUpdate(
                    item.id,
                    {
                        "reservations": item.reservations_without(order_id),
                        "consumption_history": [
                            *item.consumption_history,
                            ConsumptionRecord(
                                date=now,
                                quantity=qty,
                                order_id=order_id,
                                type=ConsumptionType.PRODUCTION,
                            ),
                        ],
                        "last_updated": now.date(),
                    },
                    expected_version=item.version,
                )
                for item, qty in loaded
            ]
            return self._writer.commit(updates)

        updated = run_with_conflict_retry(
            attempt, self._max_conflict_retries, logger, f"consume for {order_id}"
        )
        logger.info(
            "Consumed reserved materials",
            extra={
                "order_id": order_id,
                "items": {line.item_id: line.quantity.value for line in materials},
            },
        )
        return updated
