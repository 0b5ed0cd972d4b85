"""JSON-file-backed implementation of InventoryRepository.

Records use the same camelCase shape as the order-management backend's
``inventory`` collection, so an exported data file loads directly.

Bulk updates are atomic: the whole batch is applied to an in-memory copy
and validated, then written with a single temp-file replace.  Every
read-modify-write cycle runs under an OS-level lock on a sidecar
``<file>.lock``, so version checks hold across separate CLI processes.
"""

from __future__ import annotations

import json
import os
import tempfile
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterator

from filelock import FileLock, Timeout

from stockledger.domain.exceptions import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    StoreBusyError,
)
from stockledger.domain.model.inventory import (
    ConsumptionRecord,
    ConsumptionType,
    InventoryItem,
    ItemCategory,
    ProductionRecord,
    PurchaseRecord,
    Reservation,
    ReservationState,
    Specifications,
    StockStatus,
)
from stockledger.domain.model.value_objects import Money
from stockledger.domain.repository.inventory_repository import (
    InventoryRepository,
    ItemUpdate,
)

# Status labels written by older versions of the forms.
_STATUS_ALIASES = {"optimal": StockStatus.GOOD}

def _parse_timestamp(value: str) -> datetime:
    # Exports from the web backend end in "Z", which fromisoformat on 3.10 rejects
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


class JsonInventoryRepository(InventoryRepository):

    atomic_bulk_update = True

    def __init__(self, file_path: Path, lock_timeout: float = 10.0) -> None:
        self._file_path = file_path
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = FileLock(
            str(file_path.with_name(file_path.name + ".lock")), timeout=lock_timeout
        )
        self._ensure_file()

    # --- InventoryRepository interface ----------------------------------------

    def get_by_id(self, item_id: str) -> InventoryItem | None:
        for raw in self._load_raw():
            if raw["id"] == item_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[InventoryItem]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def save(self, item: InventoryItem) -> None:
        with self._locked():
            records = self._load_raw()
            replaced = False
            for i, raw in enumerate(records):
                if raw["id"] == item.id:
                    records[i] = self._to_raw(item)
                    replaced = True
                    break
            if not replaced:
                records.append(self._to_raw(item))
            self._persist_raw(records)

    def update(self, update: ItemUpdate) -> InventoryItem:
        return self.bulk_update([update])[0]

    def bulk_update(self, updates: list[ItemUpdate]) -> list[InventoryItem]:
        with self._locked():
            records = self._load_raw()
            positions = {raw["id"]: i for i, raw in enumerate(records)}
            results: list[InventoryItem] = []

            for update in updates:
                pos = positions.get(update.item_id)
                if pos is None:
                    raise EntityNotFoundError(
                        f"Inventory item '{update.item_id}' not found",
                        item_id=update.item_id,
                    )
                current = self._to_domain(records[pos])
                if (
                    update.expected_version is not None
                    and current.version != update.expected_version
                ):
                    raise ConcurrencyConflictError(
                        update.item_id, update.expected_version, current.version
                    )
                updated = current.with_changes(update.changes)
                records[pos] = self._to_raw(updated)
                results.append(updated)

            # Nothing is written unless every update in the batch applied
            self._persist_raw(records)
            return results

    def delete(self, item_id: str) -> None:
        with self._locked():
            records = [raw for raw in self._load_raw() if raw["id"] != item_id]
            self._persist_raw(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(item: InventoryItem) -> dict:
        raw: dict[str, Any] = {
            "id": item.id,
            "itemName": item.item_name,
            "category": item.category.value,
            "subcategory": item.subcategory,
            "unit": item.unit,
            "currentStock": item.current_stock,
            "minStock": item.min_stock,
            "maxStock": item.max_stock,
            "costPerUnit": str(item.cost_per_unit.amount),
            "currency": item.cost_per_unit.currency,
            "status": item.status.value,
            "supplier": item.supplier,
            "location": item.location,
            "specifications": item.specifications.to_mapping(),
            "lastUpdated": item.last_updated.isoformat() if item.last_updated else None,
            "version": item.version,
            "reservations": [
                {
                    "bindingAdviceId": r.order_id,
                    "quantity": r.quantity,
                    "date": r.date.isoformat(),
                    "status": r.state.value,
                }
                for r in item.reservations
            ],
            "purchaseHistory": [
                {
                    "date": p.date.isoformat(),
                    "quantity": p.quantity,
                    "rate": str(p.rate.amount),
                    "supplier": p.supplier,
                }
                for p in item.purchase_history
            ],
            "productionHistory": [
                {
                    "date": p.date.isoformat(),
                    "quantity": p.quantity,
                    "jobCardId": p.job_card_id,
                    "productionCost": str(p.production_cost.amount),
                }
                for p in item.production_history
            ],
            "consumptionHistory": [
                {
                    "date": c.date.isoformat(),
                    "quantity": c.quantity,
                    "bindingAdviceId": c.order_id,
                    "type": c.type.value,
                }
                for c in item.consumption_history
            ],
        }
        if item.production_cost is not None:
            raw["productionCost"] = str(item.production_cost.amount)
        if item.selling_price is not None:
            raw["sellingPrice"] = str(item.selling_price.amount)
        return raw

    @staticmethod
    def _to_domain(raw: dict) -> InventoryItem:
        currency = raw.get("currency", "INR")

        def money(value: Any) -> Money:
            return Money(Decimal(str(value)), currency)

        status_raw = raw.get("status", StockStatus.GOOD.value)
        status = _STATUS_ALIASES.get(status_raw) or StockStatus(status_raw)
        last_updated = raw.get("lastUpdated")

        return InventoryItem(
            id=raw["id"],
            item_name=raw["itemName"],
            category=ItemCategory(raw["category"]),
            subcategory=raw.get("subcategory", ""),
            unit=raw.get("unit", "units"),
            current_stock=raw["currentStock"],
            min_stock=raw.get("minStock", 0),
            max_stock=raw.get("maxStock", 0),
            cost_per_unit=money(raw.get("costPerUnit", 0)),
            production_cost=money(raw["productionCost"]) if "productionCost" in raw else None,
            selling_price=money(raw["sellingPrice"]) if "sellingPrice" in raw else None,
            status=status,
            supplier=raw.get("supplier", ""),
            location=raw.get("location", ""),
            specifications=Specifications.from_mapping(raw.get("specifications")),
            last_updated=date.fromisoformat(last_updated[:10]) if last_updated else None,
            version=raw.get("version", 0),
            reservations=[
                Reservation(
                    order_id=r["bindingAdviceId"],
                    quantity=r["quantity"],
                    date=_parse_timestamp(r["date"]),
                    state=ReservationState(r.get("status", "reserved")),
                )
                for r in raw.get("reservations") or []
            ],
            purchase_history=[
                PurchaseRecord(
                    date=_parse_timestamp(p["date"]),
                    quantity=p["quantity"],
                    rate=money(p.get("rate", 0)),
                    supplier=p.get("supplier", ""),
                )
                for p in raw.get("purchaseHistory") or []
            ],
            production_history=[
                ProductionRecord(
                    date=_parse_timestamp(p["date"]),
                    quantity=p["quantity"],
                    job_card_id=p["jobCardId"],
                    production_cost=money(p.get("productionCost", 0)),
                )
                for p in raw.get("productionHistory") or []
            ],
            consumption_history=[
                ConsumptionRecord(
                    date=_parse_timestamp(c["date"]),
                    quantity=c["quantity"],
                    order_id=c.get("bindingAdviceId"),
                    type=ConsumptionType(c.get("type", "production")),
                )
                for c in raw.get("consumptionHistory") or []
            ],
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, records: list[dict]) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self._file_path.parent, prefix=".inventory-", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(json.dumps(records, indent=2) + "\n")
            os.replace(tmp_name, self._file_path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    @contextmanager
    def _locked(self) -> Iterator[None]:
        try:
            with self._lock:
                yield
        except Timeout as exc:
            raise StoreBusyError(
                f"Inventory file {self._file_path} is locked by another process"
            ) from exc

    def _ensure_file(self) -> None:
        with self._locked():
            if not self._file_path.exists():
                self._persist_raw([])
