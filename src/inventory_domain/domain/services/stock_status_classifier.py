# src/inventory_domain/domain/services/stock_status_classifier.py
"""Read-side stock status classification.

The predicates mirror the aggregate queries of the MySQL repository. They are not
mutually exclusive: a record can be both in stock and low on stock.
"""

from enum import Enum
from typing import Iterable

from src.common.dtos.stock_dtos import StockStatisticsDTO
from src.inventory_domain.domain.entities.stock_record import StockRecord


class StockStatus(str, Enum):
    IN_STOCK = "IN_STOCK"
    LOW_STOCK = "LOW_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"


def is_classifiable(record: StockRecord) -> bool:
    """Only active, tracked, non-deleted records take part in classification."""
    return record.track_inventory and record.active and not record.deleted


def is_in_stock(record: StockRecord) -> bool:
    return is_classifiable(record) and record.available_quantity > 0


def is_low_stock(record: StockRecord) -> bool:
    # Evaluated on physical stock, not on availability.
    return is_classifiable(record) and record.stock_quantity <= record.min_stock_level


def is_out_of_stock(record: StockRecord) -> bool:
    return is_classifiable(record) and record.stock_quantity <= 0


def classify(record: StockRecord) -> set[StockStatus]:
    """Returns every status that applies to the record (empty for untracked records)."""
    statuses = set()
    if is_in_stock(record):
        statuses.add(StockStatus.IN_STOCK)
    if is_low_stock(record):
        statuses.add(StockStatus.LOW_STOCK)
    if is_out_of_stock(record):
        statuses.add(StockStatus.OUT_OF_STOCK)
    return statuses


def summarize(records: Iterable[StockRecord]) -> StockStatisticsDTO:
    """Tallies the three classifications over a set of records."""
    in_stock = low_stock = out_of_stock = 0
    for record in records:
        statuses = classify(record)
        in_stock += StockStatus.IN_STOCK in statuses
        low_stock += StockStatus.LOW_STOCK in statuses
        out_of_stock += StockStatus.OUT_OF_STOCK in statuses
    return StockStatisticsDTO(
        in_stock_products=in_stock,
        low_stock_products=low_stock,
        out_of_stock_products=out_of_stock,
    )
