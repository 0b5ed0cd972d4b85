"""Tests for the JSON-file inventory repository."""

import json
import threading
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from filelock import FileLock

from stockledger.domain.exceptions import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    InsufficientStockError,
    StoreBusyError,
)
from stockledger.domain.model.inventory import (
    ConsumptionRecord,
    ConsumptionType,
    ItemCategory,
    ProductionRecord,
    PurchaseRecord,
    Reservation,
    Specifications,
    StockStatus,
)
from stockledger.domain.model.value_objects import MaterialLine, Money
from stockledger.domain.repository.inventory_repository import ItemUpdate
from stockledger.domain.service.reservation_manager import ReservationManager
from stockledger.infrastructure.persistence.json_inventory_repository import (
    JsonInventoryRepository,
)
from tests.fakes import FIXED_NOW, FixedClock, make_item


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "data" / "inventory.json"


@pytest.fixture
def repo(data_file):
    return JsonInventoryRepository(data_file)


def _full_item():
    return make_item(
        "FP-0001",
        120,
        min_stock=50,
        name="Classmate Notebook 172pg",
        category=ItemCategory.FINISHED_PRODUCT,
        unit="pieces",
        max_stock=1000,
        cost_per_unit=Money.of("31.25"),
        production_cost=Money.of("28.00"),
        selling_price=Money.of("45.00"),
        supplier="In-house",
        location="Rack B2",
        specifications=Specifications.from_mapping({"size": "A5", "pages": 172}),
        reservations=[Reservation("BA-9", 20, FIXED_NOW)],
        purchase_history=[PurchaseRecord(FIXED_NOW, 10, Money.of("30"), "Navneet")],
        production_history=[ProductionRecord(FIXED_NOW, 100, "JC-3", Money.of("28.00"))],
        consumption_history=[
            ConsumptionRecord(FIXED_NOW, 4, None, ConsumptionType.WASTE)
        ],
        last_updated=date(2024, 3, 15),
        version=7,
    )


class TestPersistence:

    def test_creates_missing_file(self, data_file, repo):
        assert data_file.exists()
        assert repo.list_all() == []

    def test_round_trip_preserves_every_field(self, repo, data_file):
        item = _full_item()
        repo.save(item)

        assert JsonInventoryRepository(data_file).get_by_id("FP-0001") == item

    def test_records_use_camel_case(self, repo, data_file):
        repo.save(_full_item())

        [raw] = json.loads(data_file.read_text(encoding="utf-8"))
        assert raw["itemName"] == "Classmate Notebook 172pg"
        assert raw["currentStock"] == 120
        assert raw["costPerUnit"] == "31.25"
        assert raw["reservations"][0]["bindingAdviceId"] == "BA-9"
        assert raw["reservations"][0]["status"] == "reserved"
        assert raw["productionHistory"][0]["jobCardId"] == "JC-3"
        assert raw["specifications"] == {"size": "A5", "pages": 172}

    def test_save_replaces_existing(self, repo):
        repo.save(make_item("X", 10))
        repo.save(make_item("X", 99))
        assert [i.current_stock for i in repo.list_all()] == [99]

    def test_delete(self, repo):
        repo.save(make_item("X", 10))
        repo.delete("X")
        assert repo.get_by_id("X") is None

    def test_loads_older_records(self, data_file):
        data_file.parent.mkdir(parents=True)
        data_file.write_text(json.dumps([{
            "id": "RM-0004",
            "itemName": "Binding Wire",
            "category": "raw_material",
            "currentStock": 40,
            "minStock": 10,
            "costPerUnit": 2.5,
            "status": "optimal",
            "lastUpdated": "2024-02-01T09:15:00.000Z",
            "reservations": [{
                "bindingAdviceId": "BA-12",
                "quantity": 5,
                "date": "2024-02-01T09:15:00.000Z",
                "status": "reserved",
            }],
            "consumptionHistory": None,
        }]), encoding="utf-8")

        item = JsonInventoryRepository(data_file).get_by_id("RM-0004")

        assert item.status == StockStatus.GOOD
        assert item.cost_per_unit == Money(Decimal("2.5"))
        assert item.last_updated == date(2024, 2, 1)
        assert item.reservations == [
            Reservation("BA-12", 5, datetime(2024, 2, 1, 9, 15, tzinfo=timezone.utc))
        ]
        assert item.consumption_history == []
        assert item.version == 0


class TestBulkUpdate:

    def test_applies_batch_and_bumps_versions(self, repo):
        repo.save(make_item("X", 100))
        repo.save(make_item("Y", 50))

        repo.bulk_update([
            ItemUpdate("X", {"current_stock": 70}, expected_version=0),
            ItemUpdate("Y", {"current_stock": 45}, expected_version=0),
        ])

        assert repo.get_by_id("X").current_stock == 70
        assert repo.get_by_id("Y").version == 1

    def test_missing_item_writes_nothing(self, repo):
        repo.save(make_item("X", 100))

        with pytest.raises(EntityNotFoundError):
            repo.bulk_update([
                ItemUpdate("X", {"current_stock": 70}),
                ItemUpdate("nope", {"current_stock": 1}),
            ])

        assert repo.get_by_id("X").current_stock == 100

    def test_stale_version_writes_nothing(self, repo):
        repo.save(make_item("X", 100))
        repo.save(make_item("Y", 50, version=2))

        with pytest.raises(ConcurrencyConflictError, match="expected version 1, found 2"):
            repo.bulk_update([
                ItemUpdate("X", {"current_stock": 70}, expected_version=0),
                ItemUpdate("Y", {"current_stock": 45}, expected_version=1),
            ])

        assert repo.get_by_id("X").current_stock == 100

    def test_leaves_no_temp_files(self, repo, data_file):
        repo.save(make_item("X", 100))
        repo.update(ItemUpdate("X", {"current_stock": 1}))
        assert [p.name for p in data_file.parent.iterdir() if p.suffix == ".tmp"] == []


class TestCrossProcessLocking:
    """Separate repository instances stand in for separate CLI processes."""

    def test_competing_reserve_cannot_overwrite_a_batch(self, data_file):
        JsonInventoryRepository(data_file).save(make_item("X", 100))
        ours = JsonInventoryRepository(data_file)
        theirs = JsonInventoryRepository(data_file)
        outcomes = {}

        def reserve_theirs():
            try:
                ReservationManager(theirs, clock=FixedClock()).reserve(
                    "BA-2", [MaterialLine.of("X", 60)]
                )
                outcomes["BA-2"] = "reserved"
            except InsufficientStockError:
                outcomes["BA-2"] = "insufficient"

        rival = threading.Thread(target=reserve_theirs)
        persist = ours._persist_raw

        def persist_after_rival(records):
            # The rival reads and tries to write between our check and our write
            rival.start()
            rival.join(timeout=0.5)
            persist(records)

        ours._persist_raw = persist_after_rival
        ReservationManager(ours, clock=FixedClock()).reserve(
            "BA-1", [MaterialLine.of("X", 60)]
        )
        rival.join()

        x = JsonInventoryRepository(data_file).get_by_id("X")
        assert outcomes == {"BA-2": "insufficient"}
        assert x.current_stock == 40
        assert [r.order_id for r in x.reservations] == ["BA-1"]

    def test_times_out_while_another_process_holds_the_file(self, data_file):
        repo = JsonInventoryRepository(data_file, lock_timeout=0.1)
        repo.save(make_item("X", 100))

        with FileLock(str(data_file) + ".lock"):
            with pytest.raises(StoreBusyError, match="locked by another process"):
                repo.update(ItemUpdate("X", {"current_stock": 1}))

        assert repo.get_by_id("X").current_stock == 100
