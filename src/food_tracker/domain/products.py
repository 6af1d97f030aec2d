"""Domain models for the product store."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Product:
    """A distinct food item identified by name, energy and barcode."""

    id: int
    name: str
    energy: float
    barcode: str
