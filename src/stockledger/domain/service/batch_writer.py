"""Domain service: Batch Writer.

The single write path for multi-item operations.  Reserve, release and
consume each produce one batch of partial updates that must land
together.

Stores that declare ``atomic_bulk_update`` get the batch in one call.
Other stores get a saga: before each step the current values of the
fields about to change are captured as a compensating update, and if a
later step fails the applied steps are undone in reverse order.  A
rollback that itself fails leaves the store inconsistent and raises
PartialBatchFailureError for manual reconciliation.
"""

from __future__ import annotations

from stockledger.domain.exceptions import (
    EntityNotFoundError,
    PartialBatchFailureError,
)
from stockledger.domain.model.inventory import InventoryItem
from stockledger.domain.repository.inventory_repository import (
    InventoryRepository,
    ItemUpdate,
)
from stockledger.logging_config import get_logger

logger = get_logger("domain.batch_writer")


class BatchWriter:

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    def commit(self, updates: list[ItemUpdate]) -> list[InventoryItem]:
        if not updates:
            return []
        if self._inventory_repo.atomic_bulk_update:
            return self._inventory_repo.bulk_update(updates)
        return self._commit_with_compensation(updates)

    def _commit_with_compensation(
        self, updates: list[ItemUpdate]
    ) -> list[InventoryItem]:
        applied: list[tuple[ItemUpdate, InventoryItem]] = []
        results: list[InventoryItem] = []

        for update in updates:
            try:
                before = self._inventory_repo.get_by_id(update.item_id)
                if before is None:
                    raise EntityNotFoundError(
                        f"Inventory item '{update.item_id}' not found",
                        item_id=update.item_id,
                    )
                compensation = before.snapshot_of(list(update.changes))
                stored = self._inventory_repo.update(update)
            except Exception as exc:
                self._roll_back(applied, failed_id=update.item_id, cause=exc)
                raise
            applied.append(
                (
                    ItemUpdate(
                        item_id=update.item_id,
                        changes=compensation,
                        expected_version=stored.version,
                    ),
                    stored,
                )
            )
            results.append(stored)

        return results

    def _roll_back(
        self,
        applied: list[tuple[ItemUpdate, InventoryItem]],
        failed_id: str,
        cause: Exception,
    ) -> None:
        remaining = [comp.item_id for comp, _ in applied]
        for compensation, _ in reversed(applied):
            try:
                self._inventory_repo.update(compensation)
            except Exception as rollback_exc:
                logger.critical(
                    "Batch rollback failed; manual reconciliation required",
                    extra={
                        "applied_ids": remaining,
                        "failed_id": failed_id,
                        "rollback_item_id": compensation.item_id,
                        "rollback_error": str(rollback_exc),
                    },
                )
                raise PartialBatchFailureError(
                    applied_ids=remaining, failed_id=failed_id, cause=cause
                ) from rollback_exc
            remaining.remove(compensation.item_id)
        if applied:
            logger.warning(
                "Batch rolled back after failure",
                extra={
                    "rolled_back": [comp.item_id for comp, _ in applied],
                    "failed_id": failed_id,
                },
            )
