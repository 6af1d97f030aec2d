"""SQLAlchemy table models for the food tracker database."""

import datetime

from sqlalchemy import Date, Float, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all tables."""


class ProductRow(Base):
    """Stored product. Uniqueness of name, energy and barcode is not a constraint."""

    __tablename__ = "product"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    energy: Mapped[float] = mapped_column(Float, nullable=False)
    barcode: Mapped[str] = mapped_column(String, nullable=False, default="")


class ConsumedEntryRow(Base):
    """Stored consumption event. ``product_id`` is not a foreign key."""

    __tablename__ = "consumed_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[datetime.date] = mapped_column(Date, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    product_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
