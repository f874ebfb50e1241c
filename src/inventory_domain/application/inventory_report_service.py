# src/inventory_domain/application/inventory_report_service.py
"""Application service for stock status dashboards and alerts."""

import logging

from src.common.dtos.stock_dtos import StockStatisticsDTO
from src.inventory_domain.domain.entities.stock_record import StockRecord
from src.inventory_domain.domain.repositories.stock_repository import IStockRepository
from src.inventory_domain.domain.services import stock_status_classifier

logger = logging.getLogger(__name__)


class InventoryReportService:
    """Read-only views over the stock records; results are point-in-time snapshots."""

    def __init__(self, stock_repo: IStockRepository) -> None:
        self.stock_repo = stock_repo

    def get_inventory_statistics(self) -> StockStatisticsDTO:
        """Counts in-stock, low-stock and out-of-stock products with aggregate queries."""
        stats = StockStatisticsDTO(
            in_stock_products=self.stock_repo.count_in_stock_products(),
            low_stock_products=self.stock_repo.count_low_stock_products(),
            out_of_stock_products=self.stock_repo.count_out_of_stock_products(),
        )
        logger.info(
            f"Inventory statistics: {stats.in_stock_products} in stock, {stats.low_stock_products} low stock, "
            f"{stats.out_of_stock_products} out of stock"
        )
        return stats

    def get_statistics_for_products(self, product_ids: list[int]) -> StockStatisticsDTO:
        """Tallies the classifications for a subset of products in memory."""
        return stock_status_classifier.summarize(self.stock_repo.get_by_product_ids(product_ids))

    def get_in_stock_items(self) -> list[StockRecord]:
        items = self.stock_repo.find_in_stock_items()
        logger.info(f"Retrieved {len(items)} in stock items")
        return items

    def get_low_stock_items(self) -> list[StockRecord]:
        items = self.stock_repo.find_low_stock_items()
        logger.info(f"Retrieved {len(items)} low stock items")
        return items

    def get_out_of_stock_items(self) -> list[StockRecord]:
        items = self.stock_repo.find_out_of_stock_items()
        logger.info(f"Retrieved {len(items)} out of stock items")
        return items

    def get_items_by_stock_range(self, min_stock: int, max_stock: int) -> list[StockRecord]:
        if min_stock > max_stock:
            raise ValueError(f"min_stock ({min_stock}) must not exceed max_stock ({max_stock})")
        return self.stock_repo.find_by_stock_quantity_between(min_stock, max_stock)

    def build_low_stock_report(self) -> list[dict]:
        """Rows for the daily low-stock alert, out-of-stock products first."""
        rows = [
            {
                "product_id": record.product_id,
                "stock_quantity": record.stock_quantity,
                "reserved_quantity": record.reserved_quantity,
                "available_quantity": record.available_quantity,
                "min_stock_level": record.min_stock_level,
                "restock_quantity": max(record.max_stock_level - record.stock_quantity, 0),
                "out_of_stock": stock_status_classifier.is_out_of_stock(record),
            }
            for record in self.get_low_stock_items()
        ]
        rows.sort(key=lambda row: (not row["out_of_stock"], row["stock_quantity"], row["product_id"]))
        return rows
