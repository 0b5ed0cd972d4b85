"""Domain events raised after inventory is successfully mutated."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from stockledger.domain.model.inventory import InventoryItem, ItemCategory


class ChangeReason(Enum):
    CREATED = "created"
    RESERVED = "reserved"
    RELEASED = "released"
    CONSUMED = "consumed"
    PURCHASED = "purchased"
    PRODUCED = "produced"
    ADJUSTED = "adjusted"


@dataclass(frozen=True)
class InventoryChanged:
    reason: ChangeReason
    item_ids: tuple[str, ...]
    categories: frozenset[ItemCategory]
    order_id: str | None = None

    @staticmethod
    def for_items(
        reason: ChangeReason,
        items: list[InventoryItem],
        order_id: str | None = None,
    ) -> InventoryChanged:
        return InventoryChanged(
            reason=reason,
            item_ids=tuple(item.id for item in items),
            categories=frozenset(item.category for item in items),
            order_id=order_id,
        )


Listener = Callable[[InventoryChanged], None]


class EventBus:
    """Synchronous publish/subscribe; listeners run in subscription order."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def publish(self, event: InventoryChanged) -> None:
        for listener in self._listeners:
            listener(event)
