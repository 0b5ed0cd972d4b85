"""Domain service: Reservation Manager.

Reserves raw material against an order when it is approved and gives it
back when the order is cancelled.  Reserving debits ``current_stock``
immediately, so the balance always reflects outstanding reservations.

Each call is all-or-nothing across the order's materials:
  Phase 1: load and validate every item; fail before any mutation.
  Phase 2: stage every stock change and ledger entry, then commit them
            as one batch.
Items carry a version stamp; a batch computed from stale reads is
rejected by the store and the whole call is recomputed.
"""

from __future__ import annotations

from stockledger.domain.clock import Clock, SystemClock
from stockledger.domain.exceptions import (
    DuplicateReservationError,
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from stockledger.domain.model.inventory import InventoryItem, Reservation
from stockledger.domain.model.value_objects import MaterialLine
from stockledger.domain.repository.inventory_repository import (
    InventoryRepository,
    ItemUpdate,
)
from stockledger.domain.service.batch_writer import BatchWriter
from stockledger.domain.service.retry import run_with_conflict_retry
from stockledger.domain.service.stock_classifier import StockClassifier
from stockledger.domain.service.stock_mutator import StockMutator
from stockledger.logging_config import get_logger

logger = get_logger("domain.reservation_manager")


def check_material_request(order_id: str, materials: list[MaterialLine]) -> None:
    """Reject malformed requests before touching the store."""
    if not order_id or not order_id.strip():
        raise ValidationError("Order id is required")
    if not materials:
        raise ValidationError("At least one material is required")
    seen: set[str] = set()
    for line in materials:
        if line.item_id in seen:
            raise ValidationError(
                f"Item '{line.item_id}' is listed more than once for order {order_id}"
            )
        seen.add(line.item_id)


def load_items(
    inventory_repo: InventoryRepository, materials: list[MaterialLine]
) -> list[tuple[InventoryItem, int]]:
    loaded: list[tuple[InventoryItem, int]] = []
    for line in materials:
        item = inventory_repo.get_by_id(line.item_id)
        if item is None:
            raise EntityNotFoundError(
                f"Inventory item '{line.item_id}' not found", item_id=line.item_id
            )
        loaded.append((item, line.quantity.value))
    return loaded


class ReservationManager:

    def __init__(
        self,
        inventory_repo: InventoryRepository,
        classifier: StockClassifier | None = None,
        clock: Clock | None = None,
        max_conflict_retries: int = 3,
    ) -> None:
        self._inventory_repo = inventory_repo
        self._clock = clock or SystemClock()
        self._mutator = StockMutator(inventory_repo, classifier, self._clock)
        self._writer = BatchWriter(inventory_repo)
        self._max_conflict_retries = max_conflict_retries

    def reserve(
        self, order_id: str, materials: list[MaterialLine]
    ) -> list[InventoryItem]:
        """Debit stock and record a reservation for every material."""
        check_material_request(order_id, materials)

        def attempt() -> list[InventoryItem]:
            # Phase 1: load all items and validate
            loaded = load_items(self._inventory_repo, materials)
            for item, qty in loaded:
                if item.find_reservation(order_id) is not None:
                    raise DuplicateReservationError(
                        f"Order {order_id} already has {item.item_name} reserved"
                    )
                if item.current_stock < qty:
                    logger.warning(
                        "Reservation rejected: insufficient stock",
                        extra={
                            "order_id": order_id,
                            "item_id": item.id,
                            "required": qty,
                            "available": item.current_stock,
                        },
                    )
                    raise InsufficientStockError(
                        item_id=item.id,
                        item_name=item.item_name,
                        required=qty,
                        available=item.current_stock,
                    )

            # Phase 2: stage every change and commit them together
            now = self._clock.now()
            updates = []
            for item, qty in loaded:
                changes = self._mutator.adjusted(item, -qty)
                changes["reservations"] = [
                    *item.reservations,
                    Reservation(order_id=order_id, quantity=qty, date=now),
                ]
                updates.append(
                    ItemUpdate(item.id, changes, expected_version=item.version)
                )
            return self._writer.commit(updates)

        updated = run_with_conflict_retry(
            attempt, self._max_conflict_retries, logger, f"reserve for {order_id}"
        )
        logger.info(
            "Reserved materials",
            extra={
                "order_id": order_id,
                "items": {line.item_id: line.quantity.value for line in materials},
            },
        )
        return updated

    def release(self, order_id: str) -> list[InventoryItem]:
        """Credit back and remove every reservation held by the order.

        An order with nothing reserved is a no-op, so cancelling twice
        is safe.
        """
        if not order_id or not order_id.strip():
            raise ValidationError("Order id is required")

        def attempt() -> list[InventoryItem]:
            updates = []
            for item in self._inventory_repo.list_all():
                reservation = item.find_reservation(order_id)
                if reservation is None:
                    continue
                changes = self._mutator.adjusted(item, reservation.quantity)
                changes["reservations"] = item.reservations_without(order_id)
                updates.append(
                    ItemUpdate(item.id, changes, expected_version=item.version)
                )
            return self._writer.commit(updates)

        updated = run_with_conflict_retry(
            attempt, self._max_conflict_retries, logger, f"release for {order_id}"
        )
        if updated:
            logger.info(
                "Released reservations",
                extra={"order_id": order_id, "item_ids": [i.id for i in updated]},
            )
        else:
            logger.info("No reservations to release", extra={"order_id": order_id})
        return updated

    def reservations_for(self, order_id: str) -> list[tuple[InventoryItem, Reservation]]:
        """Every item holding a reserved entry for the order."""
        result = []
        for item in self._inventory_repo.list_all():
            reservation = item.find_reservation(order_id)
            if reservation is not None:
                result.append((item, reservation))
        return result
