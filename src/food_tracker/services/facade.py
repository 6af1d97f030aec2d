"""Facade over the product store, consumption log and calorie view."""

import logging
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol

from food_tracker.domain.entries import ConsumedEntry, DatabaseEntry, DateCalories
from food_tracker.domain.errors import StorageError
from food_tracker.domain.products import Product
from food_tracker.domain.results import FacadeResult, ResultStatus

NEW_PRODUCT_ID = 0
LIKE_ESCAPE = "\\"
DEFAULT_MOST_COMMON_LIMIT = 10

_logger = logging.getLogger(__name__)


class ProductRepository(Protocol):
    """Persistence interface for products."""

    def find_existing_products(
        self, name: str, energy: float, barcode: str
    ) -> list[Product]:
        """Return products matching name, energy and barcode exactly."""

    def insert(self, name: str, energy: float, barcode: str) -> Product:
        """Create a product and return it with its generated id."""

    def find_product_by_id(self, product_id: int) -> Product | None:
        """Return a product by id, if present."""

    def find_products_by_name(self, pattern: str) -> list[Product]:
        """Return products whose name matches a LIKE pattern."""


class ConsumedEntryRepository(Protocol):
    """Persistence interface for the consumption log."""

    def insert(
        self, amount: int, day: date, name: str, product_id: int
    ) -> ConsumedEntry:
        """Create a consumed entry and return it with its generated id."""

    def find_consumed_entries_by_id(self, entry_id: int) -> list[ConsumedEntry]:
        """Return entries with the given id."""

    def delete(self, entry: ConsumedEntry) -> None:
        """Delete a consumed entry."""

    def update(self, entry: ConsumedEntry) -> None:
        """Persist changes to a consumed entry."""

    def find_consumed_entries_for_date(self, day: date) -> list[ConsumedEntry]:
        """Return all entries logged on a day."""

    def find_most_common_products(self, limit: int) -> list[int]:
        """Return product ids ordered by consumption frequency."""


class CalorieRepository(Protocol):
    """Aggregation queries joining entries to their products."""

    def get_calories_period(self, start: date, end: date) -> list[DateCalories]:
        """Return the energy sum of every day with entries in the range."""

    def get_calories_per_day_in_period(
        self, start: date, end: date
    ) -> list[DateCalories]:
        """Return the energy sum of the whole range as a single item."""


class TransactionManager(Protocol):
    """Opens a unit of work that repository calls join."""

    def transaction(self) -> AbstractContextManager[None]:
        """Run the enclosed repository calls atomically."""


@dataclass
class DatabaseFacade:
    """Single entry point for UI code to the food tracker stores.

    Write operations return a ``FacadeResult``; read operations return an
    empty list when the store fails.
    """

    products: ProductRepository
    entries: ConsumedEntryRepository
    calories: CalorieRepository
    transactions: TransactionManager
    most_common_limit: int = DEFAULT_MOST_COMMON_LIMIT

    def insert_entry(
        self,
        amount: int,
        day: date | datetime,
        name: str,
        energy: float,
        product_id: int = NEW_PRODUCT_ID,
    ) -> FacadeResult:
        """Log a consumed entry, creating the product when ``product_id`` is 0."""
        consumed_on = to_day(day)
        try:
            with self.transactions.transaction():
                resolved_id = product_id
                if product_id == NEW_PRODUCT_ID:
                    resolved_id = self._resolve_new_product(name, energy)
                entry = self.entries.insert(amount, consumed_on, name, resolved_id)
        except StorageError:
            _logger.warning(
                "Failed to insert entry: name=%s day=%s",
                name,
                consumed_on,
                exc_info=True,
            )
            return FacadeResult.failure(ResultStatus.STORAGE_FAILURE)
        _logger.info(
            "Inserted entry: id=%s product_id=%s day=%s",
            entry.id,
            entry.product_id,
            consumed_on,
        )
        return FacadeResult.ok(entry.id)

    def delete_entry_by_id(self, entry_id: int) -> FacadeResult:
        """Delete the single entry with ``entry_id``."""
        try:
            with self.transactions.transaction():
                entry, status = self._find_single_entry(entry_id)
                if entry is None:
                    return FacadeResult.failure(status)
                self.entries.delete(entry)
        except StorageError:
            _logger.warning("Failed to delete entry: id=%s", entry_id, exc_info=True)
            return FacadeResult.failure(ResultStatus.STORAGE_FAILURE)
        _logger.info("Deleted entry: id=%s", entry_id)
        return FacadeResult.ok(entry_id)

    def edit_entry_by_id(self, entry_id: int, amount: int) -> FacadeResult:
        """Change the amount of the single entry with ``entry_id``."""
        try:
            with self.transactions.transaction():
                entry, status = self._find_single_entry(entry_id)
                if entry is None:
                    return FacadeResult.failure(status)
                entry.amount = amount
                self.entries.update(entry)
        except StorageError:
            _logger.warning("Failed to edit entry: id=%s", entry_id, exc_info=True)
            return FacadeResult.failure(ResultStatus.STORAGE_FAILURE)
        _logger.info("Edited entry: id=%s amount=%s", entry_id, amount)
        return FacadeResult.ok(entry_id)

    def insert_product(self, name: str, energy: float, barcode: str) -> FacadeResult:
        """Create a product unless an identical one already exists."""
        try:
            with self.transactions.transaction():
                return self._insert_product(name, energy, barcode)
        except StorageError:
            _logger.warning("Failed to insert product: name=%s", name, exc_info=True)
            return FacadeResult.failure(ResultStatus.STORAGE_FAILURE)

    def find_most_common_products(self) -> list[Product]:
        """Return the most frequently consumed products, most common first."""
        try:
            product_ids = self.entries.find_most_common_products(
                self.most_common_limit
            )
            products = []
            for product_id in product_ids:
                product = self.products.find_product_by_id(product_id)
                if product is not None:
                    products.append(product)
            return products
        except StorageError:
            _logger.warning("Failed to find most common products", exc_info=True)
            return []

    def get_entries_for_day(self, day: date | datetime) -> list[DatabaseEntry]:
        """Return the entries of a day together with their product energy."""
        consumed_on = to_day(day)
        try:
            entries = self.entries.find_consumed_entries_for_date(consumed_on)
            return [self._to_database_entry(entry) for entry in entries]
        except StorageError:
            _logger.warning(
                "Failed to load entries: day=%s", consumed_on, exc_info=True
            )
            return []

    def get_period_calories(
        self, start: date | datetime, end: date | datetime
    ) -> list[DateCalories]:
        """Return the energy total of each day with entries between two dates."""
        try:
            return self.calories.get_calories_period(to_day(start), to_day(end))
        except StorageError:
            _logger.warning(
                "Failed to load period calories: start=%s end=%s",
                start,
                end,
                exc_info=True,
            )
            return []

    def get_calories_per_day_in_period(
        self, start: date | datetime, end: date | datetime
    ) -> list[DateCalories]:
        """Return the energy total between two dates as a single item."""
        try:
            return self.calories.get_calories_per_day_in_period(
                to_day(start), to_day(end)
            )
        except StorageError:
            _logger.warning(
                "Failed to load calories in period: start=%s end=%s",
                start,
                end,
                exc_info=True,
            )
            return []

    def get_product_by_name(self, name: str) -> list[Product]:
        """Return products whose name contains ``name``."""
        try:
            return self.products.find_products_by_name(f"%{escape_like(name)}%")
        except StorageError:
            _logger.warning("Failed to search products: name=%s", name, exc_info=True)
            return []

    def _insert_product(self, name: str, energy: float, barcode: str) -> FacadeResult:
        if self.products.find_existing_products(name, energy, barcode):
            return FacadeResult.failure(ResultStatus.DUPLICATE)
        product = self.products.insert(name, energy, barcode)
        _logger.info("Inserted product: id=%s name=%s", product.id, name)
        return FacadeResult.ok(product.id)

    def _resolve_new_product(self, name: str, energy: float) -> int:
        created = self._insert_product(name, energy, "")
        if created.value is not None:
            return created.value
        # Several products may already share the triple; the lowest id wins.
        return self.products.find_existing_products(name, energy, "")[0].id

    def _find_single_entry(
        self, entry_id: int
    ) -> tuple[ConsumedEntry | None, ResultStatus]:
        matches = self.entries.find_consumed_entries_by_id(entry_id)
        if not matches:
            return None, ResultStatus.NOT_FOUND
        if len(matches) > 1:
            return None, ResultStatus.AMBIGUOUS
        return matches[0], ResultStatus.OK

    def _to_database_entry(self, entry: ConsumedEntry) -> DatabaseEntry:
        product = self.products.find_product_by_id(entry.product_id)
        if product is None:
            _logger.warning(
                "Entry references missing product: entry_id=%s product_id=%s",
                entry.id,
                entry.product_id,
            )
        return DatabaseEntry(
            id=str(entry.id),
            name=entry.name,
            amount=entry.amount,
            energy=product.energy if product is not None else 0.0,
        )


def escape_like(text: str) -> str:
    """Make ``%`` and ``_`` in ``text`` match literally in a LIKE pattern."""
    for special in (LIKE_ESCAPE, "%", "_"):
        text = text.replace(special, LIKE_ESCAPE + special)
    return text


def to_day(value: date | datetime) -> date:
    """Drop the time of day from ``value``."""
    if isinstance(value, datetime):
        return value.date()
    return value
