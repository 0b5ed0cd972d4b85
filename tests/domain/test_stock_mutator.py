"""Unit tests for the StockMutator domain service."""

import pytest

from stockledger.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    InvalidQuantityError,
)
from stockledger.domain.model.inventory import Reservation, StockStatus
from stockledger.domain.service.stock_mutator import StockMutator
from tests.fakes import FIXED_NOW, FakeInventoryRepository, FixedClock, make_item


def _mutator(*items) -> tuple[StockMutator, FakeInventoryRepository]:
    repo = FakeInventoryRepository(list(items))
    return StockMutator(repo, clock=FixedClock()), repo


class TestApplyDelta:

    def test_credit_increases_stock(self):
        mutator, repo = _mutator(make_item("X", 100))
        updated = mutator.apply_delta("X", 25)
        assert updated.current_stock == 125
        assert repo.get_by_id("X").current_stock == 125

    def test_debit_decreases_stock(self):
        mutator, repo = _mutator(make_item("X", 100))
        mutator.apply_delta("X", -40)
        assert repo.get_by_id("X").current_stock == 60

    def test_debit_to_exactly_zero(self):
        mutator, repo = _mutator(make_item("X", 10))
        mutator.apply_delta("X", -10)
        assert repo.get_by_id("X").current_stock == 0

    def test_sets_last_updated_and_status(self):
        mutator, repo = _mutator(make_item("X", 100, min_stock=20))
        updated = mutator.apply_delta("X", -85)
        assert updated.last_updated == FIXED_NOW.date()
        assert updated.status == StockStatus.LOW

    def test_debit_below_zero_rejected(self):
        mutator, repo = _mutator(make_item("X", 5, name="Glue"))
        with pytest.raises(InsufficientStockError, match="Available: 5, Required: 6") as exc:
            mutator.apply_delta("X", -6)
        assert exc.value.item_id == "X"
        assert repo.get_by_id("X").current_stock == 5

    def test_unknown_item_rejected(self):
        mutator, _ = _mutator()
        with pytest.raises(EntityNotFoundError, match="not found"):
            mutator.apply_delta("missing", 1)

    def test_zero_delta_rejected_before_store_access(self):
        mutator, repo = _mutator()
        with pytest.raises(InvalidQuantityError):
            mutator.apply_delta("missing", 0)

    def test_does_not_touch_reservations(self):
        reservation = Reservation("BA-1", 10, FIXED_NOW)
        mutator, repo = _mutator(make_item("X", 50, reservations=[reservation]))
        mutator.apply_delta("X", -20)
        assert repo.get_by_id("X").reservations == [reservation]

    def test_ledger_changes_written_with_stock(self):
        mutator, repo = _mutator(make_item("X", 50))
        mutator.apply_delta("X", 5, lambda item, now: {"supplier": "JK Paper"})
        stored = repo.get_by_id("X")
        assert stored.current_stock == 55
        assert stored.supplier == "JK Paper"
        assert repo.bulk_update_calls == 1


class TestAdjusted:

    def test_stages_without_writing(self):
        mutator, repo = _mutator(make_item("X", 50))
        changes = mutator.adjusted(repo.get_by_id("X"), -20)
        assert changes["current_stock"] == 30
        assert repo.get_by_id("X").current_stock == 50
        assert repo.bulk_update_calls == 0
