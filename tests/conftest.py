"""Shared test fixtures."""

import logging
import re
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date

import pytest

from food_tracker.adapters.sqlalchemy_database import Database
from food_tracker.config import Settings
from food_tracker.containers import AppContainer, build_container
from food_tracker.domain.entries import ConsumedEntry, DateCalories
from food_tracker.domain.errors import StorageError
from food_tracker.domain.products import Product
from food_tracker.services.facade import (
    CalorieRepository,
    ConsumedEntryRepository,
    DatabaseFacade,
    ProductRepository,
    TransactionManager,
)


@dataclass
class InMemoryProductRepository(ProductRepository):
    """In-memory product repository for tests."""

    products: list[Product] = field(default_factory=list)
    fail: bool = False

    def find_existing_products(
        self, name: str, energy: float, barcode: str
    ) -> list[Product]:
        self._check()
        return [
            product
            for product in self.products
            if product.name == name
            and product.energy == energy
            and product.barcode == barcode
        ]

    def insert(self, name: str, energy: float, barcode: str) -> Product:
        self._check()
        next_id = max((product.id for product in self.products), default=0) + 1
        product = Product(id=next_id, name=name, energy=energy, barcode=barcode)
        self.products.append(product)
        return product

    def find_product_by_id(self, product_id: int) -> Product | None:
        self._check()
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def find_products_by_name(self, pattern: str) -> list[Product]:
        self._check()
        needle = re.sub(r"\\(.)", r"\1", pattern[1:-1]).lower()
        return [product for product in self.products if needle in product.name.lower()]

    def _check(self) -> None:
        if self.fail:
            raise StorageError("product store unavailable")


@dataclass
class InMemoryConsumedEntryRepository(ConsumedEntryRepository):
    """In-memory consumption log for tests.

    Ids are not forced to be unique so ambiguous lookups can be staged.
    """

    entries: list[ConsumedEntry] = field(default_factory=list)
    fail: bool = False

    def insert(
        self, amount: int, day: date, name: str, product_id: int
    ) -> ConsumedEntry:
        self._check()
        next_id = max((entry.id for entry in self.entries), default=0) + 1
        entry = ConsumedEntry(
            id=next_id, amount=amount, date=day, name=name, product_id=product_id
        )
        self.entries.append(entry)
        return replace(entry)

    def find_consumed_entries_by_id(self, entry_id: int) -> list[ConsumedEntry]:
        self._check()
        return [replace(entry) for entry in self.entries if entry.id == entry_id]

    def delete(self, entry: ConsumedEntry) -> None:
        self._check()
        self.entries = [stored for stored in self.entries if stored.id != entry.id]

    def update(self, entry: ConsumedEntry) -> None:
        self._check()
        self.entries = [
            replace(entry) if stored.id == entry.id else stored
            for stored in self.entries
        ]

    def find_consumed_entries_for_date(self, day: date) -> list[ConsumedEntry]:
        self._check()
        return [replace(entry) for entry in self.entries if entry.date == day]

    def find_most_common_products(self, limit: int) -> list[int]:
        self._check()
        counts: dict[int, int] = {}
        for entry in self.entries:
            counts[entry.product_id] = counts.get(entry.product_id, 0) + 1
        ranked = sorted(
            counts, key=lambda product_id: (-counts[product_id], product_id)
        )
        return ranked[:limit]

    def _check(self) -> None:
        if self.fail:
            raise StorageError("consumption log unavailable")


@dataclass
class InMemoryCalorieRepository(CalorieRepository):
    """Calorie view computed from the in-memory repositories."""

    products: InMemoryProductRepository
    entries: InMemoryConsumedEntryRepository
    fail: bool = False

    def get_calories_period(self, start: date, end: date) -> list[DateCalories]:
        totals = self._totals(start, end)
        return [DateCalories(date=day, energy=totals[day]) for day in sorted(totals)]

    def get_calories_per_day_in_period(
        self, start: date, end: date
    ) -> list[DateCalories]:
        totals = self._totals(start, end)
        if not totals:
            return []
        return [DateCalories(date=start, energy=sum(totals.values()))]

    def _totals(self, start: date, end: date) -> dict[date, float]:
        if self.fail:
            raise StorageError("calorie view unavailable")
        energy_by_id = {
            product.id: product.energy for product in self.products.products
        }
        totals: dict[date, float] = {}
        for entry in self.entries.entries:
            if not start <= entry.date <= end or entry.product_id not in energy_by_id:
                continue
            energy = entry.amount * energy_by_id[entry.product_id]
            totals[entry.date] = totals.get(entry.date, 0.0) + energy
        return totals


@dataclass
class RecordingTransactionManager(TransactionManager):
    """Counts opened transactions without providing atomicity."""

    opened: int = 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        self.opened += 1
        yield


@pytest.fixture(autouse=True)
def restore_app_logger() -> Iterator[None]:
    logger = logging.getLogger("food_tracker")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite://", most_common_limit=3)


@pytest.fixture
def product_repository() -> InMemoryProductRepository:
    return InMemoryProductRepository()


@pytest.fixture
def entry_repository() -> InMemoryConsumedEntryRepository:
    return InMemoryConsumedEntryRepository()


@pytest.fixture
def memory_facade(
    product_repository: InMemoryProductRepository,
    entry_repository: InMemoryConsumedEntryRepository,
) -> DatabaseFacade:
    return DatabaseFacade(
        products=product_repository,
        entries=entry_repository,
        calories=InMemoryCalorieRepository(product_repository, entry_repository),
        transactions=RecordingTransactionManager(),
    )


@pytest.fixture
def database() -> Iterator[Database]:
    db = Database.create("sqlite://")
    db.create_schema()
    yield db
    db.dispose()


@pytest.fixture
def container(settings: Settings) -> Iterator[AppContainer]:
    app_container = build_container(settings)
    yield app_container
    app_container.close_resources()


@pytest.fixture
def facade(container: AppContainer) -> DatabaseFacade:
    return container.facade
