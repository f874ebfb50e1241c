# tests/conftest.py
import dataclasses
import threading
from datetime import datetime
from typing import Optional
from unittest.mock import Mock

import pytest
import pytz

from src.common.config.settings import settings
from src.common.exceptions.custom_exceptions import DuplicateStockRecordError
from src.inventory_domain.application.checkout_stock_service import CheckoutStockService
from src.inventory_domain.application.inventory_report_service import InventoryReportService
from src.inventory_domain.application.reservation_service import StockReservationService
from src.inventory_domain.application.stock_provisioning_service import StockProvisioningService
from src.inventory_domain.domain.entities.stock_record import StockRecord
from src.inventory_domain.domain.repositories.stock_repository import IStockRepository
from src.inventory_domain.domain.services import stock_status_classifier
from src.inventory_domain.infrastructure.api_clients.catalog_api_client import ProductCatalogApiClient
from src.inventory_domain.infrastructure.persistence.mysql_stock_repository import MySQLStockRepository


class InMemoryStockRepository(IStockRepository):
    """Stock store double for service-level tests.

    Each method holds the store lock for its whole body, the way the database holds
    a row lock for the duration of a single UPDATE statement. Nothing is locked
    across method calls.
    """

    def __init__(self, records: Optional[list[StockRecord]] = None) -> None:
        self._lock = threading.Lock()
        self._records: dict[int, StockRecord] = {}
        self._next_id = 1
        for record in records or []:
            self.create_stock_record(record)

    def _live_tracked(self, product_id: int) -> Optional[StockRecord]:
        record = self._records.get(product_id)
        if record is None or not (record.active and not record.deleted and record.track_inventory):
            return None
        return record

    def _touch(self, record: StockRecord) -> None:
        record.updated_at = datetime.now(pytz.utc)

    def reserve_stock(self, product_id: int, quantity: int) -> int:
        with self._lock:
            record = self._live_tracked(product_id)
            if record is None or record.stock_quantity - record.reserved_quantity < quantity:
                return 0
            record.reserved_quantity += quantity
            self._touch(record)
            return 1

    def release_reserved_stock(self, product_id: int, quantity: int) -> int:
        with self._lock:
            record = self._live_tracked(product_id)
            if record is None or record.reserved_quantity < quantity:
                return 0
            record.reserved_quantity -= quantity
            self._touch(record)
            return 1

    def reduce_stock(self, product_id: int, quantity: int) -> int:
        with self._lock:
            record = self._live_tracked(product_id)
            if record is None or record.stock_quantity < quantity or record.reserved_quantity < quantity:
                return 0
            record.stock_quantity -= quantity
            record.reserved_quantity -= quantity
            self._touch(record)
            return 1

    def update_stock_quantity(self, product_id: int, quantity: int) -> int:
        with self._lock:
            record = self._records.get(product_id)
            if record is None or record.deleted or record.reserved_quantity > quantity:
                return 0
            record.stock_quantity = quantity
            self._touch(record)
            return 1

    def create_stock_record(self, record: StockRecord) -> StockRecord:
        with self._lock:
            if record.product_id in self._records:
                raise DuplicateStockRecordError(record.product_id)
            now = datetime.now(pytz.utc)
            stored = dataclasses.replace(record, id=self._next_id, created_at=now, updated_at=now)
            self._next_id += 1
            self._records[record.product_id] = stored
            return dataclasses.replace(stored)

    def soft_delete_by_product_id(self, product_id: int) -> int:
        with self._lock:
            record = self._records.get(product_id)
            if record is None or record.deleted:
                return 0
            record.deleted = True
            return 1

    def delete_by_product_id(self, product_id: int) -> int:
        with self._lock:
            return 1 if self._records.pop(product_id, None) is not None else 0

    def get_by_product_id(self, product_id: int) -> Optional[StockRecord]:
        with self._lock:
            record = self._records.get(product_id)
            return dataclasses.replace(record) if record else None

    def get_by_product_ids(self, product_ids: list[int]) -> list[StockRecord]:
        with self._lock:
            return [dataclasses.replace(self._records[pid]) for pid in product_ids if pid in self._records]

    def has_available_stock(self, product_id: int, quantity: int) -> bool:
        with self._lock:
            record = self._records.get(product_id)
            return record is not None and record.is_live and record.available_quantity >= quantity

    def _snapshot(self) -> list[StockRecord]:
        with self._lock:
            return [dataclasses.replace(r) for r in sorted(self._records.values(), key=lambda r: r.product_id)]

    def find_in_stock_items(self) -> list[StockRecord]:
        return [r for r in self._snapshot() if stock_status_classifier.is_in_stock(r)]

    def find_low_stock_items(self) -> list[StockRecord]:
        return [r for r in self._snapshot() if stock_status_classifier.is_low_stock(r)]

    def find_out_of_stock_items(self) -> list[StockRecord]:
        return [r for r in self._snapshot() if stock_status_classifier.is_out_of_stock(r)]

    def find_by_stock_quantity_between(self, min_stock: int, max_stock: int) -> list[StockRecord]:
        return [r for r in self._snapshot() if r.is_live and min_stock <= r.stock_quantity <= max_stock]

    def count_in_stock_products(self) -> int:
        return len(self.find_in_stock_items())

    def count_low_stock_products(self) -> int:
        return len(self.find_low_stock_items())

    def count_out_of_stock_products(self) -> int:
        return len(self.find_out_of_stock_items())


@pytest.fixture(autouse=True)
def mock_settings_database(mocker) -> None:
    """Points the repository at a test database so no real settings leak into tests."""
    mocker.patch.object(settings, "DB_HOST", "localhost")
    mocker.patch.object(settings, "DB_DATABASE", "test_inventory_db")
    mocker.patch.object(settings, "DB_USER", "test_user")
    mocker.patch.object(settings, "DB_PASSWORD", "test_password")


@pytest.fixture
def mock_stock_repository() -> Mock:
    """Mock for MySQLStockRepository."""
    return Mock(spec=MySQLStockRepository)


@pytest.fixture
def mock_catalog_api_client() -> Mock:
    """Mock for ProductCatalogApiClient."""
    return Mock(spec=ProductCatalogApiClient)


@pytest.fixture
def reservation_service(mock_stock_repository) -> StockReservationService:
    """StockReservationService with a mocked repository."""
    return StockReservationService(stock_repo=mock_stock_repository)


@pytest.fixture
def sample_stock_record() -> StockRecord:
    """A tracked, active record: 10 in stock, 2 reserved, low-stock threshold 3."""
    return StockRecord(
        id=1,
        product_id=101,
        stock_quantity=10,
        reserved_quantity=2,
        min_stock_level=3,
        max_stock_level=50,
        created_at=datetime(2024, 1, 1, 9, 0, 0, tzinfo=pytz.utc),
        updated_at=datetime(2024, 1, 2, 9, 0, 0, tzinfo=pytz.utc),
    )


@pytest.fixture
def sample_stock_records() -> list[StockRecord]:
    """Records covering every classification, plus untracked, inactive and deleted ones."""
    return [
        StockRecord(product_id=1, stock_quantity=20, reserved_quantity=0, min_stock_level=5),  # in stock
        StockRecord(product_id=2, stock_quantity=4, reserved_quantity=1, min_stock_level=5),  # in stock + low
        StockRecord(product_id=3, stock_quantity=0, reserved_quantity=0, min_stock_level=5),  # low + out
        StockRecord(product_id=4, stock_quantity=3, reserved_quantity=3, min_stock_level=1),  # nothing available
        StockRecord(product_id=5, stock_quantity=0, track_inventory=False),  # untracked
        StockRecord(product_id=6, stock_quantity=0, active=False),  # inactive
        StockRecord(product_id=7, stock_quantity=0, deleted=True),  # soft-deleted
    ]


@pytest.fixture
def in_memory_stock_repository() -> InMemoryStockRepository:
    return InMemoryStockRepository()


@pytest.fixture
def stock_environment(in_memory_stock_repository):
    """Services wired to the in-memory store."""
    reservation = StockReservationService(stock_repo=in_memory_stock_repository)
    return {
        "repo": in_memory_stock_repository,
        "reservation": reservation,
        "report": InventoryReportService(stock_repo=in_memory_stock_repository),
        "checkout": CheckoutStockService(reservation_service=reservation),
        "provisioning": StockProvisioningService(
            stock_repo=in_memory_stock_repository, reservation_service=reservation, batch_size=2
        ),
    }
