"""Integration tests for the reserve, release and consume use cases.

Uses in-memory fake repositories, no file I/O.
"""

import pytest

from stockledger.application.consume_materials import ConsumeMaterialsHandler
from stockledger.application.dto import MaterialSpec
from stockledger.application.release_reservation import ReleaseReservationHandler
from stockledger.application.reserve_materials import ReserveMaterialsHandler
from stockledger.application.show_reservations import ShowReservationsHandler
from stockledger.domain.events import ChangeReason, EventBus
from stockledger.domain.exceptions import InsufficientStockError, InvalidQuantityError
from stockledger.domain.model.inventory import ItemCategory
from stockledger.domain.service.consumption_recorder import ConsumptionRecorder
from stockledger.domain.service.reservation_manager import ReservationManager
from tests.fakes import FakeInventoryRepository, FixedClock, make_item


class _Handlers:
    """Reserve/release/consume handlers sharing one repo and event bus."""

    def __init__(self, *items) -> None:
        self.repo = FakeInventoryRepository(list(items))
        self.events = EventBus()
        self.published = []
        self.events.subscribe(self.published.append)
        manager = ReservationManager(self.repo, clock=FixedClock())
        self.reserve = ReserveMaterialsHandler(manager, self.events)
        self.show = ShowReservationsHandler(manager)
        self.release = ReleaseReservationHandler(manager, self.events)
        self.consume = ConsumeMaterialsHandler(
            ConsumptionRecorder(self.repo, clock=FixedClock()), self.events
        )


@pytest.fixture
def handlers() -> _Handlers:
    return _Handlers(
        make_item("X", 100, min_stock=20),
        make_item("Y", 5, name="Kraft Board", category=ItemCategory.CONSUMABLE),
    )


class TestReserveMaterials:

    def test_returns_updated_lines(self, handlers):
        lines = handlers.reserve.handle("BA-1", [MaterialSpec("X", 30)])

        assert len(lines) == 1
        assert lines[0].item_id == "X"
        assert lines[0].current_stock == 70
        assert lines[0].reserved == 30

    def test_publishes_reserved_event(self, handlers):
        handlers.reserve.handle("BA-1", [MaterialSpec("X", 30), MaterialSpec("Y", 5)])

        assert len(handlers.published) == 1
        event = handlers.published[0]
        assert event.reason == ChangeReason.RESERVED
        assert event.order_id == "BA-1"
        assert event.item_ids == ("X", "Y")
        assert event.categories == frozenset(
            {ItemCategory.RAW_MATERIAL, ItemCategory.CONSUMABLE}
        )

    def test_failure_publishes_nothing(self, handlers):
        with pytest.raises(InsufficientStockError):
            handlers.reserve.handle("BA-2", [MaterialSpec("Y", 10)])

        assert handlers.published == []
        assert handlers.repo.get_by_id("Y").current_stock == 5

    @pytest.mark.parametrize("qty", [0, -3])
    def test_non_positive_quantity_rejected(self, handlers, qty):
        with pytest.raises(InvalidQuantityError):
            handlers.reserve.handle("BA-1", [MaterialSpec("X", qty)])
        assert handlers.repo.bulk_update_calls == 0


class TestReleaseReservation:

    def test_release_restores_stock(self, handlers):
        handlers.reserve.handle("BA-1", [MaterialSpec("X", 30)])

        lines = handlers.release.handle("BA-1")

        assert [(line.item_id, line.current_stock, line.reserved) for line in lines] == [("X", 100, 0)]
        assert handlers.published[-1].reason == ChangeReason.RELEASED

    def test_second_release_is_silent(self, handlers):
        handlers.reserve.handle("BA-1", [MaterialSpec("X", 30)])
        handlers.release.handle("BA-1")

        assert handlers.release.handle("BA-1") == []
        assert [e.reason for e in handlers.published] == [
            ChangeReason.RESERVED,
            ChangeReason.RELEASED,
        ]


class TestConsumeMaterials:

    def test_consume_keeps_stock_and_clears_reservation(self, handlers):
        handlers.reserve.handle("BA-1", [MaterialSpec("X", 30)])

        lines = handlers.consume.handle("BA-1", [MaterialSpec("X", 30)])

        assert lines[0].current_stock == 70
        assert lines[0].reserved == 0
        assert handlers.published[-1].reason == ChangeReason.CONSUMED
        history = handlers.repo.get_by_id("X").consumption_history
        assert [(c.quantity, c.order_id) for c in history] == [(30, "BA-1")]


class TestShowReservations:

    def test_lists_what_the_order_holds(self, handlers):
        handlers.reserve.handle("BA-1", [MaterialSpec("X", 30), MaterialSpec("Y", 2)])
        handlers.reserve.handle("BA-2", [MaterialSpec("X", 10)])

        lines = handlers.show.handle("BA-1")

        assert [(line.item_id, line.quantity) for line in lines] == [("X", 30), ("Y", 2)]
        assert lines[0].reserved_on == "2024-03-15"

    def test_nothing_after_consumption(self, handlers):
        handlers.reserve.handle("BA-1", [MaterialSpec("X", 30)])
        handlers.consume.handle("BA-1", [MaterialSpec("X", 30)])

        assert handlers.show.handle("BA-1") == []
