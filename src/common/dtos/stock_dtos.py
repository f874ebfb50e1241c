"""Data Transfer Objects for stock reservation outcomes, statistics and catalog products."""

import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


class StockOperationStatus(str, Enum):
    """Explicit outcome of a stock operation."""

    RESERVED = "RESERVED"
    RELEASED = "RELEASED"
    REDUCED = "REDUCED"
    UPDATED = "UPDATED"
    SKIPPED = "SKIPPED"  # untracked product, nothing to reserve
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    INVALID_RELEASE = "INVALID_RELEASE"
    INVALID_REDUCTION = "INVALID_REDUCTION"
    PRODUCT_NOT_TRACKED = "PRODUCT_NOT_TRACKED"
    NOT_FOUND = "NOT_FOUND"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"


SUCCESS_STATUSES = frozenset(
    {
        StockOperationStatus.RESERVED,
        StockOperationStatus.RELEASED,
        StockOperationStatus.REDUCED,
        StockOperationStatus.UPDATED,
        StockOperationStatus.SKIPPED,
    }
)


@dataclass(frozen=True)
class StockOperationResult:
    """Outcome of a single reserve/release/reduce/update call."""

    status: StockOperationStatus
    product_id: int
    quantity: int
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status in SUCCESS_STATUSES


@dataclass(frozen=True)
class OrderLineDTO:
    """One product line of an order, as seen by the stock subsystem."""

    product_id: int
    quantity: int


@dataclass
class OrderStockResult:
    """Per-line outcomes of a checkout stock step for a whole order."""

    order_ref: str
    line_results: list[StockOperationResult] = field(default_factory=list)
    failed_line: Optional[StockOperationResult] = None
    compensated_lines: list[StockOperationResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed_line is None and all(result.success for result in self.line_results)


@dataclass(frozen=True)
class StockStatisticsDTO:
    """Aggregate counts over the active, tracked stock records."""

    in_stock_products: int = 0
    low_stock_products: int = 0
    out_of_stock_products: int = 0

    @property
    def total_products(self) -> int:
        # Categories overlap; this is a tally of classifications, not of records.
        return self.in_stock_products + self.low_stock_products + self.out_of_stock_products


@dataclass
class CatalogProductDTO:
    """Product data as returned by the catalog service."""

    product_id: int
    name: Optional[str] = None
    stock_quantity: Optional[int] = None
    track_inventory: bool = True
    active: bool = True
    deleted: bool = False
    min_stock_level: Optional[int] = None
    max_stock_level: Optional[int] = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "CatalogProductDTO":
        """Creates CatalogProductDTO from a catalog API product payload."""
        mapped_data = {
            "product_id": data.get("id"),
            "name": data.get("name"),
            "stock_quantity": data.get("stockQuantity"),
            "track_inventory": data.get("trackInventory", True),
            "active": data.get("active", True),
            "deleted": data.get("deleted", False),
            "min_stock_level": data.get("minStockLevel"),
            "max_stock_level": data.get("maxStockLevel"),
        }

        if mapped_data["product_id"] is None:
            logger.error(f"Catalog product payload without id: {data}")
            raise ValueError("Product id is required")

        valid_keys = {f.name for f in dataclasses.fields(cls)}
        filtered_data = {
            k: v for k, v in mapped_data.items() if k in valid_keys and (k == "product_id" or v is not None)
        }
        return cls(**filtered_data)
