# src/inventory_domain/application/reservation_service.py
"""Application service for reserving, releasing and reducing product stock."""

import logging
from typing import Optional

from src.common.dtos.stock_dtos import StockOperationResult, StockOperationStatus
from src.inventory_domain.domain.entities.stock_record import StockRecord
from src.inventory_domain.domain.repositories.stock_repository import IStockRepository

logger = logging.getLogger(__name__)


def is_quantity(value) -> bool:
    """True for int values; bool is rejected even though it subclasses int."""
    return isinstance(value, int) and not isinstance(value, bool)


class StockReservationService:
    """Public operation surface of the stock ledger.

    Each mutation is delegated to a single conditional write of the repository. When
    the write affects no row, the record is read once to label the outcome; that
    read never feeds another write. Business-rule failures are returned as
    ``StockOperationResult`` and never corrected or retried here.
    """

    def __init__(self, stock_repo: IStockRepository) -> None:
        """Initializes the StockReservationService."""
        self.stock_repo = stock_repo

    def _invalid_quantity(self, product_id: int, quantity, operation: str) -> Optional[StockOperationResult]:
        if is_quantity(quantity) and quantity > 0:
            return None
        logger.warning(
            f"Rejected {operation} for product {product_id}: quantity must be a positive integer, got {quantity!r}"
        )
        return StockOperationResult(
            status=StockOperationStatus.INVALID_ARGUMENT,
            product_id=product_id,
            quantity=quantity,
            message="Quantity must be a positive integer",
        )

    def _lookup_live(self, product_id: int) -> Optional[StockRecord]:
        record = self.stock_repo.get_by_product_id(product_id)
        if record is None or not record.is_live:
            return None
        return record

    def reserve(self, product_id: int, quantity: int) -> StockOperationResult:
        """Provisionally commits ``quantity`` units to an in-flight order."""
        invalid = self._invalid_quantity(product_id, quantity, "reserve")
        if invalid:
            return invalid

        if self.stock_repo.reserve_stock(product_id, quantity) == 1:
            logger.info(f"Reserved {quantity} items for product {product_id}")
            return StockOperationResult(StockOperationStatus.RESERVED, product_id, quantity)

        record = self._lookup_live(product_id)
        if record is None:
            logger.warning(f"Could not reserve stock for product {product_id}: no stock record")
            return StockOperationResult(
                StockOperationStatus.NOT_FOUND, product_id, quantity, f"No stock record for product {product_id}"
            )
        if not record.track_inventory:
            logger.warning(f"Could not reserve stock for product {product_id}: inventory is not tracked")
            return StockOperationResult(
                StockOperationStatus.PRODUCT_NOT_TRACKED,
                product_id,
                quantity,
                f"Product {product_id} does not track inventory",
            )

        logger.warning(
            f"Could not reserve {quantity} items for product {product_id}: "
            f"only {record.available_quantity} available"
        )
        return StockOperationResult(
            StockOperationStatus.INSUFFICIENT_STOCK,
            product_id,
            quantity,
            f"Requested {quantity}, available {record.available_quantity}",
        )

    def release(self, product_id: int, quantity: int) -> StockOperationResult:
        """Rolls back a reservation that will not be fulfilled."""
        invalid = self._invalid_quantity(product_id, quantity, "release")
        if invalid:
            return invalid

        if self.stock_repo.release_reserved_stock(product_id, quantity) == 1:
            logger.info(f"Released {quantity} reserved items for product {product_id}")
            return StockOperationResult(StockOperationStatus.RELEASED, product_id, quantity)

        record = self._lookup_live(product_id)
        if record is not None and not record.track_inventory:
            logger.warning(f"Could not release stock for product {product_id}: inventory is not tracked")
            return StockOperationResult(
                StockOperationStatus.PRODUCT_NOT_TRACKED,
                product_id,
                quantity,
                f"Product {product_id} does not track inventory",
            )

        if record is None:
            message = f"No stock record for product {product_id}"
        else:
            message = f"Requested release of {quantity}, reserved {record.reserved_quantity}"
        logger.error(f"Invalid release for product {product_id}: {message}")
        return StockOperationResult(StockOperationStatus.INVALID_RELEASE, product_id, quantity, message)

    def confirm_and_reduce(self, product_id: int, quantity: int) -> StockOperationResult:
        """Turns ``quantity`` previously reserved units into a permanent sale."""
        invalid = self._invalid_quantity(product_id, quantity, "reduction")
        if invalid:
            return invalid

        if self.stock_repo.reduce_stock(product_id, quantity) == 1:
            logger.info(f"Reduced stock of product {product_id} by {quantity} sold items")
            return StockOperationResult(StockOperationStatus.REDUCED, product_id, quantity)

        record = self._lookup_live(product_id)
        if record is not None and not record.track_inventory:
            logger.warning(f"Could not reduce stock for product {product_id}: inventory is not tracked")
            return StockOperationResult(
                StockOperationStatus.PRODUCT_NOT_TRACKED,
                product_id,
                quantity,
                f"Product {product_id} does not track inventory",
            )

        if record is None:
            message = f"No stock record for product {product_id}"
        else:
            message = (
                f"Requested reduction of {quantity}, stock {record.stock_quantity}, "
                f"reserved {record.reserved_quantity}"
            )
        logger.error(f"Invalid reduction for product {product_id}: {message}")
        return StockOperationResult(StockOperationStatus.INVALID_REDUCTION, product_id, quantity, message)

    def set_absolute_stock(self, product_id: int, quantity: int) -> StockOperationResult:
        """Administrative restock or correction of the physical stock quantity."""
        if not is_quantity(quantity) or quantity < 0:
            logger.warning(f"Rejected stock update for product {product_id}: invalid quantity {quantity!r}")
            return StockOperationResult(
                StockOperationStatus.INVALID_ARGUMENT,
                product_id,
                quantity,
                "Stock quantity must be a non-negative integer",
            )

        if self.stock_repo.update_stock_quantity(product_id, quantity) == 1:
            logger.info(f"Updated stock for product {product_id} to {quantity}")
            return StockOperationResult(StockOperationStatus.UPDATED, product_id, quantity)

        record = self.stock_repo.get_by_product_id(product_id)
        if record is None or record.deleted:
            logger.warning(f"No stock record found for product {product_id}")
            return StockOperationResult(
                StockOperationStatus.NOT_FOUND, product_id, quantity, f"No stock record for product {product_id}"
            )

        logger.warning(
            f"Rejected stock update for product {product_id}: {quantity} is below the "
            f"{record.reserved_quantity} units currently reserved"
        )
        return StockOperationResult(
            StockOperationStatus.INVALID_ARGUMENT,
            product_id,
            quantity,
            f"Stock quantity {quantity} is below reserved quantity {record.reserved_quantity}",
        )

    def available_quantity(self, product_id: int) -> int:
        """Units that can still be reserved.

        For records that do not track inventory the full stock quantity is returned;
        callers check ``track_inventory`` to tell "0 available" from "not tracked".
        """
        record = self._lookup_live(product_id)
        if record is None:
            return 0
        if not record.track_inventory:
            return record.stock_quantity
        return record.available_quantity

    def has_available_stock(self, product_id: int, quantity: int) -> bool:
        """Point-in-time availability check; a reservation may still fail afterwards."""
        if not is_quantity(quantity) or quantity <= 0:
            return False
        return self.stock_repo.has_available_stock(product_id, quantity)

    def get_stock_record(self, product_id: int) -> Optional[StockRecord]:
        """Snapshot of a product's live stock record."""
        return self._lookup_live(product_id)
