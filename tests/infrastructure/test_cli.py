"""End-to-end tests for the click CLI against a JSON data file."""

import pytest
from click.testing import CliRunner

from stockledger.application.query_cache import InventoryQueryCache
from stockledger.domain.events import EventBus
from stockledger.domain.service.stock_classifier import StockClassifier
from stockledger.infrastructure.bootstrap import Container, inventory_repository
from stockledger.infrastructure.cli.main import cli
from stockledger.infrastructure.settings import Settings
from tests.fakes import FixedClock


@pytest.fixture
def container(tmp_path):
    settings = Settings(data_dir=tmp_path)
    events = EventBus()
    cache = InventoryQueryCache()
    cache.attach(events)
    return Container(
        settings=settings,
        inventory_repo=inventory_repository(settings),
        classifier=StockClassifier(),
        events=events,
        query_cache=cache,
        clock=FixedClock(),
    )


@pytest.fixture
def run(container):
    runner = CliRunner()

    def invoke(*args):
        return runner.invoke(cli, list(args), obj=container)

    return invoke


@pytest.fixture
def paper(run):
    result = run(
        "item", "add", "--name", "A4 Paper", "--category", "raw_material",
        "--unit", "reams", "--stock", "100", "--min-stock", "20", "--max-stock", "500",
    )
    assert result.exit_code == 0, result.output
    return "RM-0001"


class TestItemCommands:

    def test_add_reports_new_id(self, run, paper, container):
        assert container.inventory_repo.get_by_id(paper).unit == "reams"
        result = run("item", "list")
        assert "A4 Paper" in result.output
        assert "RM-0001" in result.output

    def test_add_rejects_duplicate(self, run, paper):
        result = run("item", "add", "--name", "a4 paper", "--category", "raw_material")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_list_empty_category(self, run, paper):
        result = run("item", "list", "--category", "finished_product")
        assert "No inventory items found." in result.output

    def test_adjust_and_low_stock(self, run, paper):
        assert "No items are low on stock." in run("item", "low-stock").output

        result = run("item", "adjust", "--id", paper, "--delta=-85", "--waste")
        assert result.exit_code == 0, result.output
        assert "stock now 15" in result.output

        low = run("item", "low-stock").output
        assert "RM-0001" in low
        assert "low" in low

    def test_receive(self, run, paper, container):
        result = run("item", "receive", "--id", paper, "--quantity", "50", "--rate", "245.50")
        assert result.exit_code == 0, result.output
        assert container.inventory_repo.get_by_id(paper).current_stock == 150

    def test_produce_rejects_raw_material(self, run, paper):
        result = run("item", "produce", "--id", paper, "--quantity", "5", "--job-card", "JC-1")
        assert result.exit_code == 1
        assert "not a finished product" in result.output


class TestReservationCommands:

    def test_reserve_consume_cycle(self, run, paper, container):
        result = run("reservation", "reserve", "--order", "BA-1", "--materials", f"{paper}:30")
        assert result.exit_code == 0, result.output
        assert "stock=70 reserved=30" in result.output

        result = run("reservation", "consume", "--order", "BA-1", "--materials", f"{paper}:30")
        assert result.exit_code == 0, result.output
        assert "stock=70 reserved=0" in result.output
        assert len(container.inventory_repo.get_by_id(paper).consumption_history) == 1

    def test_release_restores_stock(self, run, paper):
        run("reservation", "reserve", "--order", "BA-1", "--materials", f"{paper}:30")

        result = run("reservation", "release", "--order", "BA-1")

        assert "reservations released" in result.output
        assert "stock=100 reserved=0" in result.output

    def test_show_reserved_materials(self, run, paper):
        run("reservation", "reserve", "--order", "BA-1", "--materials", f"{paper}:30")

        result = run("reservation", "show", "--order", "BA-1")

        assert result.exit_code == 0, result.output
        assert "Order BA-1 holds:" in result.output
        assert "30 reams (since 2024-03-15)" in result.output
        assert "nothing reserved" in run("reservation", "show", "--order", "BA-9").output

    def test_release_unknown_order(self, run, paper):
        result = run("reservation", "release", "--order", "BA-404")
        assert result.exit_code == 0
        assert "Order BA-404: nothing reserved." in result.output

    def test_insufficient_stock(self, run, paper, container):
        result = run("reservation", "reserve", "--order", "BA-2", "--materials", f"{paper}:101")
        assert result.exit_code == 1
        assert "Insufficient stock for A4 Paper" in result.output
        assert container.inventory_repo.get_by_id(paper).current_stock == 100

    def test_bad_material_format(self, run, paper):
        result = run("reservation", "reserve", "--order", "BA-1", "--materials", "RM-0001=3")
        assert result.exit_code == 2
        assert "Invalid material format" in result.output

    def test_consume_without_reservation(self, run, paper):
        result = run("reservation", "consume", "--order", "BA-1", "--materials", f"{paper}:3")
        assert result.exit_code == 1
        assert "no reservation" in result.output


class TestItemValuation:

    def test_list_shows_total_value(self, run):
        run("item", "add", "--name", "Kraft Board", "--category", "raw_material",
            "--stock", "40", "--cost", "12.50")
        result = run("item", "list")
        assert "INR 500.00" in result.output
        assert "Total value: INR 500.00" in result.output
