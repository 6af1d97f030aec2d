"""Domain models for the consumption log and its read models."""

from dataclasses import dataclass
from datetime import date


@dataclass
class ConsumedEntry:
    """A logged amount of a product consumed on a given day."""

    id: int
    amount: int
    date: date
    name: str
    product_id: int


@dataclass(frozen=True)
class DatabaseEntry:
    """Consumed entry joined with the energy of its product."""

    id: str
    name: str
    amount: int
    energy: float


@dataclass(frozen=True)
class DateCalories:
    """Summed energy for a calendar day."""

    date: date
    energy: float
