"""Abstract repository for the InventoryItem aggregate.

Defined in the domain layer so the domain never depends on
infrastructure.  The contract is a key-value store of items addressed
by id that supports reads and partial updates.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from stockledger.domain.model.inventory import InventoryItem


@dataclass(frozen=True)
class ItemUpdate:
    """A partial update of one item.

    ``changes`` maps InventoryItem field names to their new values.  When
    ``expected_version`` is set the store must reject the update if the
    stored item has moved on since it was read.
    """

    item_id: str
    changes: dict[str, Any] = field(default_factory=dict)
    expected_version: int | None = None


class InventoryRepository(ABC):

    # Whether bulk_update applies all updates or none.
    atomic_bulk_update: bool = True

    @abstractmethod
    def get_by_id(self, item_id: str) -> InventoryItem | None:
        """Return an item by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[InventoryItem]:
        """Return every inventory item."""

    @abstractmethod
    def save(self, item: InventoryItem) -> None:
        """Persist a new item or overwrite an existing one."""

    @abstractmethod
    def update(self, update: ItemUpdate) -> InventoryItem:
        """Apply a single partial update and return the stored item.

        Raises EntityNotFoundError for an unknown id and
        ConcurrencyConflictError on a version mismatch.
        """

    @abstractmethod
    def bulk_update(self, updates: list[ItemUpdate]) -> list[InventoryItem]:
        """Apply several partial updates, returning items in input order."""

    @abstractmethod
    def delete(self, item_id: str) -> None:
        """Remove an item."""
