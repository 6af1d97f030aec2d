"""SQLAlchemy repository for the consumption log."""

from dataclasses import dataclass
from datetime import date

from sqlalchemy import delete, func, select, update

from food_tracker.adapters.sqlalchemy_database import Database
from food_tracker.adapters.sqlalchemy_tables import ConsumedEntryRow
from food_tracker.domain.entries import ConsumedEntry
from food_tracker.services.facade import ConsumedEntryRepository


@dataclass
class SqlAlchemyConsumedEntryRepository(ConsumedEntryRepository):
    """SQLAlchemy implementation for consumed entries."""

    database: Database

    def insert(
        self, amount: int, day: date, name: str, product_id: int
    ) -> ConsumedEntry:
        """Insert an entry row and return it."""
        row = ConsumedEntryRow(
            amount=amount, date=day, name=name, product_id=product_id
        )
        with self.database.session_scope() as session:
            session.add(row)
            session.flush()
            return _parse_entry(row)

    def find_consumed_entries_by_id(self, entry_id: int) -> list[ConsumedEntry]:
        """Return entries with the id."""
        statement = select(ConsumedEntryRow).where(ConsumedEntryRow.id == entry_id)
        with self.database.session_scope() as session:
            return [_parse_entry(row) for row in session.scalars(statement)]

    def delete(self, entry: ConsumedEntry) -> None:
        """Delete the entry row."""
        with self.database.session_scope() as session:
            session.execute(
                delete(ConsumedEntryRow).where(ConsumedEntryRow.id == entry.id)
            )

    def update(self, entry: ConsumedEntry) -> None:
        """Write all entry fields back to its row."""
        with self.database.session_scope() as session:
            session.execute(
                update(ConsumedEntryRow)
                .where(ConsumedEntryRow.id == entry.id)
                .values(
                    amount=entry.amount,
                    date=entry.date,
                    name=entry.name,
                    product_id=entry.product_id,
                )
            )

    def find_consumed_entries_for_date(self, day: date) -> list[ConsumedEntry]:
        """Return entries logged on the day."""
        statement = (
            select(ConsumedEntryRow)
            .where(ConsumedEntryRow.date == day)
            .order_by(ConsumedEntryRow.id)
        )
        with self.database.session_scope() as session:
            return [_parse_entry(row) for row in session.scalars(statement)]

    def find_most_common_products(self, limit: int) -> list[int]:
        """Return product ids by entry count, ties broken by lowest id."""
        entry_count = func.count(ConsumedEntryRow.id)
        statement = (
            select(ConsumedEntryRow.product_id)
            .group_by(ConsumedEntryRow.product_id)
            .order_by(entry_count.desc(), ConsumedEntryRow.product_id)
            .limit(limit)
        )
        with self.database.session_scope() as session:
            return list(session.scalars(statement))


def _parse_entry(row: ConsumedEntryRow) -> ConsumedEntry:
    return ConsumedEntry(
        id=row.id,
        amount=row.amount,
        date=row.date,
        name=row.name,
        product_id=row.product_id,
    )
