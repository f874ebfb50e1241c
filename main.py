# main.py
"""Main application entry point for the stock reservation service.

Usage:
    python main.py                      # bootstrap tables and run the daily low-stock report scheduler
    python main.py report               # print the inventory statistics and low-stock report once
    python main.py provision 11 12 13   # create stock records for catalog products that lack one
"""

import logging
import sys
import time

import pytz
import schedule

from src.common.config.settings import settings
from src.common.exceptions.custom_exceptions import (
    APIError,
    ApplicationError,
    DatabaseError,
)
from src.common.logger_config import setup_logging
from src.common.utils.date_utils import local_time
from src.inventory_domain.application.inventory_report_service import InventoryReportService
from src.inventory_domain.application.reservation_service import StockReservationService
from src.inventory_domain.application.stock_provisioning_service import StockProvisioningService
from src.inventory_domain.infrastructure.api_clients.catalog_api_client import ProductCatalogApiClient
from src.inventory_domain.infrastructure.persistence.mysql_stock_repository import MySQLStockRepository

logger = logging.getLogger(__name__)


def setup_inventory_dependencies() -> tuple[StockReservationService, InventoryReportService, StockProvisioningService]:
    """Initializes and wires up inventory domain dependencies."""
    stock_repository = MySQLStockRepository()
    reservation_service = StockReservationService(stock_repo=stock_repository)
    report_service = InventoryReportService(stock_repo=stock_repository)
    provisioning_service = StockProvisioningService(
        stock_repo=stock_repository,
        reservation_service=reservation_service,
        catalog_client=ProductCatalogApiClient(),
    )
    return reservation_service, report_service, provisioning_service


def create_inventory_db_tables() -> None:
    """Creates tables for the inventory domain."""
    stock_repo = MySQLStockRepository()
    try:
        stock_repo.create_tables()
        logger.info("Database tables created/verified successfully")
    except DatabaseError as e:
        logger.error(f"Error creating inventory database tables: {e}")
        raise
    finally:
        stock_repo.close()


def run_low_stock_report(report_service: InventoryReportService) -> None:
    """Logs the dashboard statistics and the products that need restocking."""
    logger.info(f"--- Low stock report at {local_time(settings.REPORT_TIMEZONE).strftime('%Y-%m-%d %H:%M:%S %Z')} ---")
    try:
        stats = report_service.get_inventory_statistics()
        logger.info(
            f"In stock: {stats.in_stock_products}, low stock: {stats.low_stock_products}, "
            f"out of stock: {stats.out_of_stock_products}"
        )

        for row in report_service.build_low_stock_report():
            flag = "OUT OF STOCK" if row["out_of_stock"] else "low"
            logger.warning(
                f"Product {row['product_id']} [{flag}]: stock {row['stock_quantity']} "
                f"(reserved {row['reserved_quantity']}, min {row['min_stock_level']}), "
                f"suggested restock {row['restock_quantity']}"
            )
    except DatabaseError as e:
        logger.error(f"Low stock report failed: {e}")


def run_catalog_provisioning(provisioning_service: StockProvisioningService, product_ids: list[int]) -> None:
    try:
        created = provisioning_service.sync_from_catalog(product_ids)
        logger.info(f"Provisioned {created} new stock records")
    except (APIError, DatabaseError, ApplicationError) as e:
        logger.error(f"Catalog provisioning failed: {e}")
        raise


def parse_product_ids(args: list[str]) -> list[int]:
    try:
        return [int(arg) for arg in args]
    except ValueError:
        raise ApplicationError(f"Product ids must be integers, got {args}")


if __name__ == "__main__":
    setup_logging()
    create_inventory_db_tables()
    _, inventory_report_service, stock_provisioning_service = setup_inventory_dependencies()

    command = sys.argv[1] if len(sys.argv) > 1 else "schedule"

    if command == "report":
        run_low_stock_report(inventory_report_service)
    elif command == "provision":
        run_catalog_provisioning(stock_provisioning_service, parse_product_ids(sys.argv[2:]))
    elif command == "schedule":
        report_tz = pytz.timezone(settings.REPORT_TIMEZONE)
        logger.info(f"Scheduling low stock report every day at {settings.LOW_STOCK_REPORT_TIME} {report_tz.zone}")
        schedule.every().day.at(settings.LOW_STOCK_REPORT_TIME, report_tz).do(
            run_low_stock_report, inventory_report_service
        )
        while True:
            schedule.run_pending()
            time.sleep(30)
    else:
        logger.error(f"Unknown command: {command}")
        sys.exit(2)
