"""Stock Record entity."""

from dataclasses import dataclass
from datetime import datetime

DEFAULT_MIN_STOCK_LEVEL = 0
DEFAULT_MAX_STOCK_LEVEL = 1000


@dataclass
class StockRecord:
    """Quantity ledger of a single product.

    ``available_quantity`` is derived from the two counters on every read and is
    never stored.
    """

    product_id: int
    stock_quantity: int = 0
    reserved_quantity: int = 0
    min_stock_level: int = DEFAULT_MIN_STOCK_LEVEL
    max_stock_level: int = DEFAULT_MAX_STOCK_LEVEL
    track_inventory: bool = True
    active: bool = True
    deleted: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    id: int | None = None  # For persistence, if it has a unique DB ID

    def __post_init__(self) -> None:
        """Post-initialization for validation."""
        if self.stock_quantity < 0:
            raise ValueError("Stock quantity cannot be negative.")
        if self.reserved_quantity < 0:
            raise ValueError("Reserved quantity cannot be negative.")
        if self.reserved_quantity > self.stock_quantity:
            raise ValueError("Reserved quantity cannot exceed stock quantity.")

    @property
    def available_quantity(self) -> int:
        return self.stock_quantity - self.reserved_quantity

    @property
    def is_live(self) -> bool:
        """True when the record takes part in stock operations."""
        return self.active and not self.deleted

    @classmethod
    def from_row(cls, row: dict) -> "StockRecord":
        """Builds a StockRecord from a dictionary cursor row."""
        return cls(
            id=row.get("id"),
            product_id=row["product_id"],
            stock_quantity=row["stock_quantity"],
            reserved_quantity=row["reserved_quantity"],
            min_stock_level=row["min_stock_level"],
            max_stock_level=row["max_stock_level"],
            track_inventory=bool(row["track_inventory"]),
            active=bool(row["active"]),
            deleted=bool(row["deleted"]),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
