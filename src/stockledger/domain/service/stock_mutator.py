"""Domain service: Stock Mutator.

The only code that changes ``current_stock``.  Every stock change goes
through ``adjusted`` (which stages the change for a batch) or
``apply_delta`` (which writes one item immediately).  Neither touches
the reservation ledger.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

from stockledger.domain.clock import Clock, SystemClock
from stockledger.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    InvalidQuantityError,
)
from stockledger.domain.model.inventory import InventoryItem
from stockledger.domain.repository.inventory_repository import (
    InventoryRepository,
    ItemUpdate,
)
from stockledger.domain.service.retry import run_with_conflict_retry
from stockledger.domain.service.stock_classifier import StockClassifier
from stockledger.logging_config import get_logger

logger = get_logger("domain.stock_mutator")

# Extra field changes written alongside the stock change, e.g. a history entry.
LedgerChanges = Callable[[InventoryItem, datetime], dict[str, Any]]


class StockMutator:

    def __init__(
        self,
        inventory_repo: InventoryRepository,
        classifier: StockClassifier | None = None,
        clock: Clock | None = None,
        max_conflict_retries: int = 0,
    ) -> None:
        self._inventory_repo = inventory_repo
        self._classifier = classifier or StockClassifier()
        self._clock = clock or SystemClock()
        self._max_conflict_retries = max_conflict_retries

    def adjusted(self, item: InventoryItem, signed_quantity: int) -> dict[str, Any]:
        """Stage a stock change without writing it.

        Returns the field changes for an ItemUpdate: the new stock, the
        logical date and the re-derived status.
        """
        _check_delta(signed_quantity)
        new_stock = item.current_stock + signed_quantity
        if new_stock < 0:
            raise InsufficientStockError(
                item_id=item.id,
                item_name=item.item_name,
                required=-signed_quantity,
                available=item.current_stock,
            )
        return {
            "current_stock": new_stock,
            "last_updated": self._clock.now().date(),
            "status": self._classifier.classify_level(
                new_stock, item.min_stock, item.max_stock
            ),
        }

    def apply_delta(
        self,
        item_id: str,
        signed_quantity: int,
        ledger_changes: LedgerChanges | None = None,
    ) -> InventoryItem:
        """Apply a signed stock change to one item and persist it."""
        _check_delta(signed_quantity)

        def attempt() -> InventoryItem:
            item = self._inventory_repo.get_by_id(item_id)
            if item is None:
                raise EntityNotFoundError(
                    f"Inventory item '{item_id}' not found", item_id=item_id
                )
            changes = self.adjusted(item, signed_quantity)
            if ledger_changes is not None:
                changes.update(ledger_changes(item, self._clock.now()))
            return self._inventory_repo.update(
                ItemUpdate(item_id=item.id, changes=changes, expected_version=item.version)
            )

        updated = run_with_conflict_retry(
            attempt, self._max_conflict_retries, logger, f"stock change on {item_id}"
        )
        logger.info(
            "Stock changed",
            extra={
                "item_id": item_id,
                "delta": signed_quantity,
                "current_stock": updated.current_stock,
            },
        )
        return updated


def _check_delta(signed_quantity: int) -> None:
    if isinstance(signed_quantity, bool) or not isinstance(signed_quantity, int):
        raise InvalidQuantityError(
            f"Stock delta must be an integer, got {type(signed_quantity).__name__}"
        )
    if signed_quantity == 0:
        raise InvalidQuantityError("Stock delta cannot be zero")
