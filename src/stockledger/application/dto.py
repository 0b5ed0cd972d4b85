"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockledger.domain.model.inventory import InventoryItem
from stockledger.domain.model.value_objects import MaterialLine


@dataclass(frozen=True)
class MaterialSpec:
    """Input: an item id and the quantity the order needs."""

    item_id: str
    quantity: int


def to_material_lines(specs: list[MaterialSpec]) -> list[MaterialLine]:
    return [MaterialLine.of(spec.item_id, spec.quantity) for spec in specs]


@dataclass(frozen=True)
class InventoryLineDTO:
    """Output: one item as displayed to the user."""

    item_id: str
    item_name: str
    category: str
    unit: str
    current_stock: int
    reserved: int
    min_stock: int
    status: str
    value: str

    @staticmethod
    def from_item(item: InventoryItem) -> InventoryLineDTO:
        return InventoryLineDTO(
            item_id=item.id,
            item_name=item.item_name,
            category=item.category.value,
            unit=item.unit,
            current_stock=item.current_stock,
            reserved=item.reserved_quantity,
            min_stock=item.min_stock,
            status=item.status.value,
            value=str(item.stock_value),
        )


@dataclass(frozen=True)
class LowStockLineDTO:
    """Output: a low-stock item with its stored and freshly derived status."""

    item_id: str
    item_name: str
    current_stock: int
    min_stock: int
    stored_status: str
    computed_status: str
    diverged: bool


@dataclass(frozen=True)
class ReservationLineDTO:
    """Output: stock an order is currently holding on one item."""

    item_id: str
    item_name: str
    unit: str
    quantity: int
    reserved_on: str


@dataclass(frozen=True)
class InventoryViewDTO:
    """Output: the listed items and the value of their stock on hand."""

    lines: list[InventoryLineDTO]
    total_value: str
