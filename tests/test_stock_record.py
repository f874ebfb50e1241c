"""Tests for the Stock Record entity and stock DTOs."""

from datetime import datetime

import pytest

from src.common.dtos.stock_dtos import (
    CatalogProductDTO,
    OrderStockResult,
    StockOperationResult,
    StockOperationStatus,
    StockStatisticsDTO,
)
from src.inventory_domain.domain.entities.stock_record import StockRecord


def test_stock_record_defaults() -> None:
    record = StockRecord(product_id=1)

    assert record.stock_quantity == 0
    assert record.reserved_quantity == 0
    assert record.min_stock_level == 0
    assert record.max_stock_level == 1000
    assert record.track_inventory is True
    assert record.is_live is True


def test_available_quantity_is_derived_from_counters(sample_stock_record) -> None:
    assert sample_stock_record.available_quantity == 8

    sample_stock_record.reserved_quantity = 10

    assert sample_stock_record.available_quantity == 0


@pytest.mark.parametrize(
    "stock, reserved, message",
    [
        (-1, 0, "Stock quantity cannot be negative"),
        (5, -1, "Reserved quantity cannot be negative"),
        (5, 6, "Reserved quantity cannot exceed stock quantity"),
    ],
)
def test_stock_record_rejects_broken_ledger(stock, reserved, message) -> None:
    with pytest.raises(ValueError, match=message):
        StockRecord(product_id=1, stock_quantity=stock, reserved_quantity=reserved)


def test_is_live_false_for_inactive_or_deleted() -> None:
    assert StockRecord(product_id=1, active=False).is_live is False
    assert StockRecord(product_id=1, deleted=True).is_live is False


def test_from_row_maps_tinyint_flags() -> None:
    row = {
        "id": 7,
        "product_id": 42,
        "stock_quantity": 12,
        "reserved_quantity": 4,
        "min_stock_level": 2,
        "max_stock_level": 100,
        "track_inventory": 1,
        "active": 1,
        "deleted": 0,
        "created_at": datetime(2024, 5, 1, 8, 0, 0),
        "updated_at": datetime(2024, 5, 2, 8, 0, 0),
    }

    record = StockRecord.from_row(row)

    assert record.id == 7
    assert record.product_id == 42
    assert record.available_quantity == 8
    assert record.track_inventory is True
    assert record.deleted is False
    assert record.updated_at.day == 2


def test_operation_result_success_flag() -> None:
    assert StockOperationResult(StockOperationStatus.RESERVED, 1, 2).success is True
    assert StockOperationResult(StockOperationStatus.SKIPPED, 1, 2).success is True
    assert StockOperationResult(StockOperationStatus.INSUFFICIENT_STOCK, 1, 2).success is False
    assert StockOperationResult(StockOperationStatus.INVALID_RELEASE, 1, 2).success is False


def test_order_stock_result_fails_with_failed_line() -> None:
    failed = StockOperationResult(StockOperationStatus.INSUFFICIENT_STOCK, 2, 5)
    result = OrderStockResult(
        order_ref="ORD-1",
        line_results=[StockOperationResult(StockOperationStatus.RESERVED, 1, 1), failed],
        failed_line=failed,
    )

    assert result.success is False
    assert OrderStockResult(order_ref="ORD-2").success is True


def test_statistics_total_is_sum_of_counts() -> None:
    stats = StockStatisticsDTO(in_stock_products=4, low_stock_products=2, out_of_stock_products=1)

    assert stats.total_products == 7


def test_catalog_product_from_api_response() -> None:
    product = CatalogProductDTO.from_api_response(
        {
            "id": 15,
            "name": "Trail Runner",
            "stockQuantity": 30,
            "active": True,
            "updatedAt": "2024-03-01T10:15:00Z",
        }
    )

    assert product.product_id == 15
    assert product.name == "Trail Runner"
    assert product.stock_quantity == 30
    assert product.track_inventory is True
    assert product.min_stock_level is None


def test_catalog_product_without_id_is_rejected() -> None:
    with pytest.raises(ValueError, match="Product id is required"):
        CatalogProductDTO.from_api_response({"name": "No id"})
