# src/inventory_domain/application/stock_provisioning_service.py
"""Application service for the stock record lifecycle driven by the product catalog."""

import logging
from typing import Callable, Iterator, Optional

from src.common.config.settings import settings
from src.common.dtos.stock_dtos import CatalogProductDTO, StockOperationResult, StockOperationStatus
from src.common.exceptions.custom_exceptions import ApplicationError, DuplicateStockRecordError
from src.inventory_domain.application.reservation_service import StockReservationService, is_quantity
from src.inventory_domain.domain.entities.stock_record import StockRecord
from src.inventory_domain.domain.repositories.stock_repository import IStockRepository
from src.inventory_domain.infrastructure.api_clients.catalog_api_client import ProductCatalogApiClient

logger = logging.getLogger(__name__)


class StockProvisioningService:
    """Creates, updates and removes stock records as products come and go.

    Records are created when a product appears with a positive quantity, or lazily
    on the first stock-bearing update. Quantities of existing records are only
    changed through ``StockReservationService.set_absolute_stock``.
    """

    def __init__(
        self,
        stock_repo: IStockRepository,
        reservation_service: StockReservationService,
        catalog_client: Optional[ProductCatalogApiClient] = None,
        batch_size: int = settings.PROVISIONING_BATCH_SIZE,
    ) -> None:
        self.stock_repo = stock_repo
        self.reservation_service = reservation_service
        self.catalog_client = catalog_client
        self.batch_size = batch_size

    def _create_record(
        self,
        product_id: int,
        quantity: int,
        min_stock_level: Optional[int],
        max_stock_level: Optional[int],
        track_inventory: bool,
        active: bool = True,
    ) -> Optional[StockRecord]:
        record = StockRecord(
            product_id=product_id,
            stock_quantity=quantity,
            reserved_quantity=0,
            min_stock_level=settings.DEFAULT_MIN_STOCK_LEVEL if min_stock_level is None else min_stock_level,
            max_stock_level=settings.DEFAULT_MAX_STOCK_LEVEL if max_stock_level is None else max_stock_level,
            track_inventory=track_inventory,
            active=active,
        )
        try:
            return self.stock_repo.create_stock_record(record)
        except DuplicateStockRecordError:
            # A concurrent creator won; its record is authoritative.
            logger.info(f"Stock record for product {product_id} was created concurrently")
            return None

    def on_product_created(
        self,
        product_id: int,
        initial_quantity: Optional[int],
        min_stock_level: Optional[int] = None,
        max_stock_level: Optional[int] = None,
        track_inventory: bool = True,
        active: bool = True,
    ) -> Optional[StockRecord]:
        """Creates the product's stock record when it starts with a positive quantity.

        Records of inactive products are created inactive and take no part in stock operations.
        """
        if initial_quantity is None or initial_quantity <= 0:
            logger.info(f"Product {product_id} created without stock, no stock record created")
            return None
        return self._create_record(
            product_id, initial_quantity, min_stock_level, max_stock_level, track_inventory, active=active
        )

    def on_product_stock_updated(self, product_id: int, quantity: int) -> StockOperationResult:
        """Applies a product update carrying a stock quantity, creating the record if needed."""
        if not is_quantity(quantity) or quantity < 0:
            return StockOperationResult(
                StockOperationStatus.INVALID_ARGUMENT, product_id, quantity, "Stock quantity must be non-negative"
            )

        existing = self.stock_repo.get_by_product_id(product_id)
        if existing is None:
            if self._create_record(product_id, quantity, None, None, True) is not None:
                return StockOperationResult(StockOperationStatus.UPDATED, product_id, quantity)
        return self.reservation_service.set_absolute_stock(product_id, quantity)

    def on_product_deactivated(self, product_id: int) -> bool:
        """Soft-deletes the product's stock record."""
        removed = self.stock_repo.soft_delete_by_product_id(product_id) == 1
        if removed:
            logger.info(f"Stock record for product {product_id} flagged as deleted")
        return removed

    def on_product_deleted(self, product_id: int) -> bool:
        """Physically removes the product's stock record as part of product removal."""
        removed = self.stock_repo.delete_by_product_id(product_id) == 1
        if removed:
            logger.info(f"Stock record for product {product_id} removed")
        else:
            logger.warning(f"No stock record to remove for product {product_id}")
        return removed

    def provision_from_catalog_product(self, product: CatalogProductDTO) -> Optional[StockRecord]:
        if product.deleted:
            logger.info(f"Skipping deleted catalog product {product.product_id}")
            return None
        logger.debug(f"Provisioning stock for catalog product {product.product_id} ({product.name})")
        return self.on_product_created(
            product.product_id,
            product.stock_quantity,
            min_stock_level=product.min_stock_level,
            max_stock_level=product.max_stock_level,
            track_inventory=product.track_inventory,
            active=product.active,
        )

    def _chunk_ids(self, product_ids: list[int], chunk_size: int) -> Iterator[list[int]]:
        """Split product ids into chunks of specified size."""
        for i in range(0, len(product_ids), chunk_size):
            yield product_ids[i : i + chunk_size]

    def sync_from_catalog(
        self, product_ids: list[int], progress_callback: Optional[Callable[[int, int], None]] = None
    ) -> int:
        """Provisions stock records for catalog products that do not own one yet.

        Args:
            product_ids: Catalog product ids to check.
            progress_callback: Optional callback receiving (batch number, records created in batch).

        Returns:
            Number of stock records created.
        """
        if self.catalog_client is None:
            raise ApplicationError("Catalog sync requires a ProductCatalogApiClient")

        total_ids = len(product_ids)
        logger.info(f"Starting catalog stock provisioning for {total_ids} products with batch size {self.batch_size}")

        created_count = 0
        failed_count = 0

        for batch_num, batch_ids in enumerate(self._chunk_ids(product_ids, self.batch_size), 1):
            existing_ids = {record.product_id for record in self.stock_repo.get_by_product_ids(batch_ids)}
            missing_ids = [product_id for product_id in batch_ids if product_id not in existing_ids]
            if not missing_ids:
                logger.info(f"Batch {batch_num}: all {len(batch_ids)} products already provisioned")
                continue

            batch_created = 0
            for product in self.catalog_client.fetch_products(missing_ids):
                try:
                    if self.provision_from_catalog_product(product) is not None:
                        batch_created += 1
                except ApplicationError as e:
                    failed_count += 1
                    logger.error(f"Failed to provision stock for product {product.product_id}: {e}")
                    continue

            created_count += batch_created
            logger.info(f"Batch {batch_num} completed: {batch_created} stock records created")
            if progress_callback:
                progress_callback(batch_num, batch_created)

        logger.info(f"Catalog stock provisioning completed: {created_count} created, {failed_count} failed")
        return created_count
