"""SQLAlchemy queries aggregating energy over consumed entries."""

from dataclasses import dataclass
from datetime import date

from sqlalchemy import func, select

from food_tracker.adapters.sqlalchemy_database import Database
from food_tracker.adapters.sqlalchemy_tables import ConsumedEntryRow, ProductRow
from food_tracker.domain.entries import DateCalories
from food_tracker.services.facade import CalorieRepository

_ENTRY_ENERGY = ConsumedEntryRow.amount * ProductRow.energy


@dataclass
class SqlAlchemyCalorieRepository(CalorieRepository):
    """Joins consumed entries to products to sum amount times energy."""

    database: Database

    def get_calories_period(self, start: date, end: date) -> list[DateCalories]:
        """Return one total per day with entries, ordered by day."""
        statement = (
            select(ConsumedEntryRow.date, func.sum(_ENTRY_ENERGY))
            .join_from(
                ConsumedEntryRow,
                ProductRow,
                ProductRow.id == ConsumedEntryRow.product_id,
            )
            .where(ConsumedEntryRow.date.between(start, end))
            .group_by(ConsumedEntryRow.date)
            .order_by(ConsumedEntryRow.date)
        )
        with self.database.session_scope() as session:
            return [
                DateCalories(date=day, energy=float(total or 0.0))
                for day, total in session.execute(statement)
            ]

    def get_calories_per_day_in_period(
        self, start: date, end: date
    ) -> list[DateCalories]:
        """Return the total of the whole range dated at ``start``."""
        statement = (
            select(func.sum(_ENTRY_ENERGY))
            .join_from(
                ConsumedEntryRow,
                ProductRow,
                ProductRow.id == ConsumedEntryRow.product_id,
            )
            .where(ConsumedEntryRow.date.between(start, end))
        )
        with self.database.session_scope() as session:
            total = session.scalar(statement)
        if total is None:
            return []
        return [DateCalories(date=start, energy=float(total))]
