# src/inventory_domain/application/checkout_stock_service.py
"""Stock steps of the checkout flow.

Stock is reserved when the order is placed, reduced when payment or fulfillment
is confirmed, and released when the order is cancelled, expires or its payment
fails.
"""

import logging
from typing import Optional

from src.common.dtos.stock_dtos import OrderLineDTO, OrderStockResult, StockOperationResult, StockOperationStatus
from src.inventory_domain.application.reservation_service import StockReservationService, is_quantity

logger = logging.getLogger(__name__)


def _merge_lines(lines: list[OrderLineDTO]) -> list[OrderLineDTO]:
    """Combines lines of the same product, keeping first-seen order."""
    quantities: dict[int, int] = {}
    for line in lines:
        quantities[line.product_id] = quantities.get(line.product_id, 0) + line.quantity
    return [OrderLineDTO(product_id=product_id, quantity=quantity) for product_id, quantity in quantities.items()]


def _first_invalid_line(lines: list[OrderLineDTO]) -> Optional[StockOperationResult]:
    """Checks the raw lines, so a bad line cannot be folded into a valid total by merging."""
    for line in lines:
        if not is_quantity(line.quantity) or line.quantity <= 0:
            return StockOperationResult(
                StockOperationStatus.INVALID_ARGUMENT,
                line.product_id,
                line.quantity,
                "Quantity must be a positive integer",
            )
    return None


class CheckoutStockService:

    def __init__(self, reservation_service: StockReservationService) -> None:
        self.reservation_service = reservation_service

    def _reject_invalid_lines(self, result: OrderStockResult, lines: list[OrderLineDTO], label: str) -> bool:
        invalid = _first_invalid_line(lines)
        if invalid is None:
            return False
        result.line_results.append(invalid)
        result.failed_line = invalid
        logger.warning(
            f"Order {result.order_ref}: {label} rejected, invalid quantity {invalid.quantity!r} "
            f"for product {invalid.product_id}"
        )
        return True

    def reserve_order_lines(self, order_ref: str, lines: list[OrderLineDTO]) -> OrderStockResult:
        """Reserves every line of an order, or none of them.

        Each line is its own conditional write. When a line fails, the lines reserved
        so far are released again and the failing outcome is reported.
        A line with a non-positive or non-integer quantity rejects the whole order
        before anything is written.
        """
        result = OrderStockResult(order_ref=order_ref)
        if self._reject_invalid_lines(result, lines, "reservation"):
            return result

        reserved: list[StockOperationResult] = []

        for line in _merge_lines(lines):
            outcome = self.reservation_service.reserve(line.product_id, line.quantity)
            if outcome.status == StockOperationStatus.PRODUCT_NOT_TRACKED:
                # Unlimited stock, nothing to hold back
                outcome = StockOperationResult(
                    StockOperationStatus.SKIPPED, line.product_id, line.quantity, outcome.message
                )
            result.line_results.append(outcome)

            if outcome.status == StockOperationStatus.RESERVED:
                reserved.append(outcome)
            elif not outcome.success:
                result.failed_line = outcome
                logger.warning(
                    f"Order {order_ref}: reservation failed for product {line.product_id} ({outcome.status.value})"
                )
                break

        if result.failed_line is not None:
            for done in reversed(reserved):
                release = self.reservation_service.release(done.product_id, done.quantity)
                result.compensated_lines.append(release)
                if not release.success:
                    logger.error(
                        f"Order {order_ref}: could not release {done.quantity} items of product {done.product_id}"
                    )
            return result

        logger.info(f"Order {order_ref}: stock reserved for {len(reserved)} line(s)")
        return result

    def _apply_to_lines(self, order_ref: str, lines: list[OrderLineDTO], operation, label: str) -> OrderStockResult:
        result = OrderStockResult(order_ref=order_ref)
        if self._reject_invalid_lines(result, lines, label):
            return result

        for line in _merge_lines(lines):
            outcome = operation(line.product_id, line.quantity)
            if outcome.status == StockOperationStatus.PRODUCT_NOT_TRACKED:
                outcome = StockOperationResult(
                    StockOperationStatus.SKIPPED, line.product_id, line.quantity, outcome.message
                )
            result.line_results.append(outcome)
            if not outcome.success and result.failed_line is None:
                # Lines are independent here; keep going so every reserved unit is handled.
                result.failed_line = outcome
                logger.error(
                    f"Order {order_ref}: {label} failed for product {line.product_id} ({outcome.status.value})"
                )
        return result

    def confirm_order_lines(self, order_ref: str, lines: list[OrderLineDTO]) -> OrderStockResult:
        """Turns the order's reservations into sales."""
        return self._apply_to_lines(order_ref, lines, self.reservation_service.confirm_and_reduce, "stock reduction")

    def release_order_lines(self, order_ref: str, lines: list[OrderLineDTO]) -> OrderStockResult:
        """Gives the order's reservations back to available stock."""
        return self._apply_to_lines(order_ref, lines, self.reservation_service.release, "reservation release")
