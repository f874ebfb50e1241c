# src/inventory_domain/domain/repositories/stock_repository.py
"""Stock record repository interface.

Every mutating method is a single conditional write: the success predicate and the
arithmetic are evaluated by the store against the same row version, and the
number of affected rows (1 or 0) is returned. 0 is a business outcome, not an error.
"""
from abc import ABC, abstractmethod
from typing import Optional

from src.inventory_domain.domain.entities.stock_record import StockRecord


class IStockRepository(ABC):

    # --- conditional mutations ---

    @abstractmethod
    def reserve_stock(self, product_id: int, quantity: int) -> int:
        """Increases reserved quantity by ``quantity`` only if that much is available."""
        pass

    @abstractmethod
    def release_reserved_stock(self, product_id: int, quantity: int) -> int:
        """Decreases reserved quantity by ``quantity`` only if at least that much is reserved."""
        pass

    @abstractmethod
    def reduce_stock(self, product_id: int, quantity: int) -> int:
        """Decreases stock and reserved quantity together only if both cover ``quantity``."""
        pass

    @abstractmethod
    def update_stock_quantity(self, product_id: int, quantity: int) -> int:
        """Writes an absolute stock quantity; reserved quantity is left untouched."""
        pass

    # --- lifecycle ---

    @abstractmethod
    def create_stock_record(self, record: StockRecord) -> StockRecord:
        """Inserts a new stock record; a product may own at most one."""
        pass

    @abstractmethod
    def soft_delete_by_product_id(self, product_id: int) -> int:
        """Flags the product's record as deleted."""
        pass

    @abstractmethod
    def delete_by_product_id(self, product_id: int) -> int:
        """Physically removes the product's record (product removal only)."""
        pass

    # --- reads ---

    @abstractmethod
    def get_by_product_id(self, product_id: int) -> Optional[StockRecord]:
        """Retrieves the record of a product, including inactive or deleted ones."""
        pass

    @abstractmethod
    def get_by_product_ids(self, product_ids: list[int]) -> list[StockRecord]:
        """Retrieves the records of several products."""
        pass

    @abstractmethod
    def has_available_stock(self, product_id: int, quantity: int) -> bool:
        """Point-in-time check whether ``quantity`` units are available."""
        pass

    @abstractmethod
    def find_in_stock_items(self) -> list[StockRecord]:
        pass

    @abstractmethod
    def find_low_stock_items(self) -> list[StockRecord]:
        pass

    @abstractmethod
    def find_out_of_stock_items(self) -> list[StockRecord]:
        pass

    @abstractmethod
    def find_by_stock_quantity_between(self, min_stock: int, max_stock: int) -> list[StockRecord]:
        """Live records whose stock quantity lies in the inclusive range."""
        pass

    @abstractmethod
    def count_in_stock_products(self) -> int:
        pass

    @abstractmethod
    def count_low_stock_products(self) -> int:
        pass

    @abstractmethod
    def count_out_of_stock_products(self) -> int:
        pass
