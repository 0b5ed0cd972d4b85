"""InventoryItem aggregate — one stock-keeping unit and its ledgers.

Each item carries its own stock balance, the active reservations placed
against it by orders (binding advices), and append-only audit histories
for purchases, production and consumption.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Union

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import Money


class ItemCategory(Enum):
    RAW_MATERIAL = "raw_material"
    FINISHED_PRODUCT = "finished_product"
    CONSUMABLE = "consumable"
    SPARE_PART = "spare_part"


class StockStatus(Enum):
    GOOD = "good"
    LOW = "low"
    CRITICAL = "critical"
    OVERSTOCKED = "overstocked"


class ReservationState(Enum):
    RESERVED = "reserved"
    CONSUMED = "consumed"
    RELEASED = "released"


class ConsumptionType(Enum):
    PRODUCTION = "production"
    ADJUSTMENT = "adjustment"
    WASTE = "waste"


@dataclass(frozen=True)
class Reservation:
    """Stock debited against an order ahead of production."""

    order_id: str
    quantity: int
    date: datetime
    state: ReservationState = ReservationState.RESERVED


@dataclass(frozen=True)
class ConsumptionRecord:
    date: datetime
    quantity: int
    order_id: str | None
    type: ConsumptionType = ConsumptionType.PRODUCTION


@dataclass(frozen=True)
class PurchaseRecord:
    date: datetime
    quantity: int
    rate: Money
    supplier: str


@dataclass(frozen=True)
class ProductionRecord:
    date: datetime
    quantity: int
    job_card_id: str
    production_cost: Money


SpecValue = Union[str, int, float, bool]


@dataclass(frozen=True)
class Specifications:
    """Descriptive attributes of a material.

    The attribute kinds the shop floor actually uses are typed fields;
    anything else lands in ``extra`` so older records still load.
    """

    size: str | None = None
    weight: str | None = None
    color: str | None = None
    brand: str | None = None
    material: str | None = None
    gauge: str | None = None
    coating: str | None = None
    finish: str | None = None
    type: str | None = None
    extra: dict[str, SpecValue] = field(default_factory=dict)

    _KNOWN = (
        "size", "weight", "color", "brand", "material",
        "gauge", "coating", "finish", "type",
    )

    @classmethod
    def from_mapping(cls, raw: dict[str, Any] | None) -> Specifications:
        raw = dict(raw or {})
        known: dict[str, str] = {}
        for name in cls._KNOWN:
            value = raw.pop(name, None)
            if value not in (None, ""):
                known[name] = str(value)
        return cls(**known, extra=raw)

    def to_mapping(self) -> dict[str, SpecValue]:
        result: dict[str, SpecValue] = {
            name: getattr(self, name)
            for name in self._KNOWN
            if getattr(self, name) is not None
        }
        result.update(self.extra)
        return result


@dataclass
class InventoryItem:
    """Aggregate root for a single SKU.

    Use ``InventoryItem.create()`` for new items; it enforces the stock
    level rules.  The ``__init__`` stays permissive so the repository can
    reconstitute persisted records without re-validating.

    Invariants:
    - ``current_stock`` is never negative
    - ``current_stock`` already excludes outstanding reservations
      (reserving debits stock immediately)
    - at most one reserved entry per order
    """

    id: str
    item_name: str
    category: ItemCategory
    current_stock: int
    unit: str = "units"
    subcategory: str = ""
    min_stock: int = 0
    max_stock: int = 0
    cost_per_unit: Money = field(default_factory=Money.zero)
    production_cost: Money | None = None
    selling_price: Money | None = None
    status: StockStatus = StockStatus.GOOD
    supplier: str = ""
    location: str = ""
    specifications: Specifications = field(default_factory=Specifications)
    reservations: list[Reservation] = field(default_factory=list)
    purchase_history: list[PurchaseRecord] = field(default_factory=list)
    production_history: list[ProductionRecord] = field(default_factory=list)
    consumption_history: list[ConsumptionRecord] = field(default_factory=list)
    last_updated: date | None = None
    version: int = 0

    # --- Factory (used for NEW items only) ------------------------------------

    @staticmethod
    def create(
        item_id: str,
        item_name: str,
        category: ItemCategory,
        current_stock: int = 0,
        min_stock: int = 0,
        max_stock: int = 0,
        **attrs: Any,
    ) -> InventoryItem:
        """Create a new item, enforcing the stock level rules."""
        if not item_name or not item_name.strip():
            raise ValidationError("Item name is required")
        for label, value in (
            ("Current stock", current_stock),
            ("Minimum stock", min_stock),
            ("Maximum stock", max_stock),
        ):
            if value < 0:
                raise ValidationError(f"{label} cannot be negative, got {value}")
        if max_stock > 0 and min_stock > max_stock:
            raise ValidationError(
                f"Minimum stock {min_stock} exceeds maximum stock {max_stock}"
            )
        if category != ItemCategory.FINISHED_PRODUCT and (
            attrs.get("production_cost") is not None
            or attrs.get("selling_price") is not None
        ):
            raise ValidationError(
                "Production cost and selling price apply to finished products only"
            )
        return InventoryItem(
            id=item_id,
            item_name=item_name.strip(),
            category=category,
            current_stock=current_stock,
            min_stock=min_stock,
            max_stock=max_stock,
            **attrs,
        )

    # --- Reservation ledger ---------------------------------------------------

    @property
    def reserved_quantity(self) -> int:
        return sum(
            r.quantity
            for r in self.reservations
            if r.state == ReservationState.RESERVED
        )

    def find_reservation(self, order_id: str) -> Reservation | None:
        for reservation in self.reservations:
            if (
                reservation.order_id == order_id
                and reservation.state == ReservationState.RESERVED
            ):
                return reservation
        return None

    def reservations_without(self, order_id: str) -> list[Reservation]:
        """Ledger with the order's reserved entry removed."""
        return [
            r
            for r in self.reservations
            if not (r.order_id == order_id and r.state == ReservationState.RESERVED)
        ]

    # --- Valuation ------------------------------------------------------------

    @property
    def valuation_rate(self) -> Money:
        """Per-unit rate used to value stock on hand.

        Finished products are valued at their selling price, falling back
        to production cost; everything else at its purchase cost.
        """
        if self.category == ItemCategory.FINISHED_PRODUCT:
            return self.selling_price or self.production_cost or self.cost_per_unit
        return self.cost_per_unit

    @property
    def stock_value(self) -> Money:
        return self.valuation_rate * self.current_stock

    # --- Partial updates ------------------------------------------------------

    def with_changes(self, changes: dict[str, Any]) -> InventoryItem:
        """Return a copy with *changes* applied and the version bumped."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Cannot update field(s) {', '.join(sorted(unknown))} on '{self.id}'"
            )
        return replace(self, **changes, version=self.version + 1)

    def snapshot_of(self, names: set[str] | list[str]) -> dict[str, Any]:
        """Current values of *names*, for building compensating updates."""
        return {name: getattr(self, name) for name in names}


UPDATABLE_FIELDS = frozenset(
    f.name for f in fields(InventoryItem) if f.name not in ("id", "version")
)
