"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockledger.application.query_cache import InventoryQueryCache
from stockledger.domain.clock import Clock, SystemClock
from stockledger.domain.events import EventBus
from stockledger.domain.repository.inventory_repository import InventoryRepository
from stockledger.domain.service.consumption_recorder import ConsumptionRecorder
from stockledger.domain.service.reservation_manager import ReservationManager
from stockledger.domain.service.stock_classifier import StockClassifier
from stockledger.domain.service.stock_mutator import StockMutator
from stockledger.infrastructure.persistence.json_inventory_repository import (
    JsonInventoryRepository,
)
from stockledger.infrastructure.settings import Settings, get_settings
from stockledger.logging_config import configure_logging


@dataclass
class Container:
    """Per-process object graph shared by the CLI commands."""

    settings: Settings
    inventory_repo: InventoryRepository
    classifier: StockClassifier
    events: EventBus
    query_cache: InventoryQueryCache
    clock: Clock

    def reservation_manager(self) -> ReservationManager:
        return ReservationManager(
            self.inventory_repo,
            classifier=self.classifier,
            clock=self.clock,
            max_conflict_retries=self.settings.max_conflict_retries,
        )

    def consumption_recorder(self) -> ConsumptionRecorder:
        return ConsumptionRecorder(
            self.inventory_repo,
            clock=self.clock,
            max_conflict_retries=self.settings.max_conflict_retries,
        )

    def stock_mutator(self) -> StockMutator:
        return StockMutator(
            self.inventory_repo,
            classifier=self.classifier,
            clock=self.clock,
            max_conflict_retries=self.settings.max_conflict_retries,
        )


def inventory_repository(settings: Settings | None = None) -> JsonInventoryRepository:
    settings = settings or get_settings()
    return JsonInventoryRepository(
        settings.inventory_file, lock_timeout=settings.lock_timeout
    )


def build_container(settings: Settings | None = None) -> Container:
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_output=settings.log_json)

    events = EventBus()
    cache = InventoryQueryCache()
    cache.attach(events)

    return Container(
        settings=settings,
        inventory_repo=inventory_repository(settings),
        classifier=StockClassifier(
            critical_fraction=settings.critical_fraction,
            overstock_fraction=settings.overstock_fraction,
        ),
        events=events,
        query_cache=cache,
        clock=SystemClock(),
    )
