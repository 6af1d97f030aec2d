"""SQLAlchemy repository for products."""

from dataclasses import dataclass

from sqlalchemy import select

from food_tracker.adapters.sqlalchemy_database import Database
from food_tracker.adapters.sqlalchemy_tables import ProductRow
from food_tracker.domain.products import Product
from food_tracker.services.facade import LIKE_ESCAPE, ProductRepository


@dataclass
class SqlAlchemyProductRepository(ProductRepository):
    """SQLAlchemy implementation for the product store."""

    database: Database

    def find_existing_products(
        self, name: str, energy: float, barcode: str
    ) -> list[Product]:
        """Return products matching all three fields, oldest first."""
        statement = (
            select(ProductRow)
            .where(
                ProductRow.name == name,
                ProductRow.energy == energy,
                ProductRow.barcode == barcode,
            )
            .order_by(ProductRow.id)
        )
        with self.database.session_scope() as session:
            return [_parse_product(row) for row in session.scalars(statement)]

    def insert(self, name: str, energy: float, barcode: str) -> Product:
        """Insert a product row and return it."""
        row = ProductRow(name=name, energy=energy, barcode=barcode)
        with self.database.session_scope() as session:
            session.add(row)
            session.flush()
            return _parse_product(row)

    def find_product_by_id(self, product_id: int) -> Product | None:
        """Return a product by id."""
        with self.database.session_scope() as session:
            row = session.get(ProductRow, product_id)
            if row is None:
                return None
            return _parse_product(row)

    def find_products_by_name(self, pattern: str) -> list[Product]:
        """Return products whose name matches the LIKE pattern.

        ``LIKE_ESCAPE`` marks literal ``%`` and ``_`` in the pattern.
        """
        statement = (
            select(ProductRow)
            .where(ProductRow.name.like(pattern, escape=LIKE_ESCAPE))
            .order_by(ProductRow.id)
        )
        with self.database.session_scope() as session:
            return [_parse_product(row) for row in session.scalars(statement)]


def _parse_product(row: ProductRow) -> Product:
    return Product(
        id=row.id,
        name=row.name,
        energy=float(row.energy),
        barcode=row.barcode or "",
    )
