# src/inventory_domain/infrastructure/persistence/mysql_stock_repository.py
"""MySQL implementation of the stock record repository.

Reserve, release and reduce are each a single ``UPDATE ... WHERE <predicate>``
statement. InnoDB evaluates the predicate against the current row version under
the row lock taken by the update itself, so two concurrent reservations can never
both pass a check that only one of them satisfies. The affected-row count is the
outcome; nothing is read before writing.
"""

import logging
import threading
from typing import Optional

import mysql.connector
from mysql.connector import Error, errorcode
from mysql.connector.constants import ClientFlag

from src.common.config.settings import settings
from src.common.exceptions.custom_exceptions import DatabaseError, DuplicateStockRecordError
from src.inventory_domain.domain.entities.stock_record import StockRecord
from src.inventory_domain.domain.repositories.stock_repository import IStockRepository

logger = logging.getLogger(__name__)

TABLE_NAME = "inv_stock_records"

RECORD_COLUMNS = (
    "id, product_id, stock_quantity, reserved_quantity, min_stock_level, max_stock_level, "
    "track_inventory, active, deleted, created_at, updated_at"
)

# Records that take part in reserve/release/reduce and in status aggregates
LIVE_TRACKED_PREDICATE = "active = 1 AND deleted = 0 AND track_inventory = 1"

RESERVE_STOCK_QUERY = f"""
UPDATE {TABLE_NAME}
SET reserved_quantity = reserved_quantity + %s
WHERE product_id = %s AND {LIVE_TRACKED_PREDICATE}
AND (stock_quantity - reserved_quantity) >= %s
"""

RELEASE_RESERVED_STOCK_QUERY = f"""
UPDATE {TABLE_NAME}
SET reserved_quantity = reserved_quantity - %s
WHERE product_id = %s AND {LIVE_TRACKED_PREDICATE}
AND reserved_quantity >= %s
"""

REDUCE_STOCK_QUERY = f"""
UPDATE {TABLE_NAME}
SET stock_quantity = stock_quantity - %s, reserved_quantity = reserved_quantity - %s
WHERE product_id = %s AND {LIVE_TRACKED_PREDICATE}
AND stock_quantity >= %s AND reserved_quantity >= %s
"""

UPDATE_STOCK_QUANTITY_QUERY = f"""
UPDATE {TABLE_NAME}
SET stock_quantity = %s
WHERE product_id = %s AND deleted = 0
AND reserved_quantity <= %s
"""


class MySQLStockRepository(IStockRepository):
    """MySQL implementation of the Stock Record Repository.

    Connections are kept per thread; each statement runs in its own transaction
    and is committed (or rolled back) before the method returns.
    """

    def __init__(self) -> None:
        """Initializes the repository."""
        self._local = threading.local()

    def _get_connection(self):
        """Establishes or returns the calling thread's MySQL connection."""
        connection = getattr(self._local, "connection", None)
        if not connection or not connection.is_connected():
            try:
                connection = mysql.connector.connect(
                    host=settings.DB_HOST,
                    port=settings.DB_PORT,
                    database=settings.DB_DATABASE,
                    user=settings.DB_USER,
                    password=settings.DB_PASSWORD,
                    autocommit=False,
                    charset="utf8mb4",
                    use_unicode=True,
                    # rowcount reports matched rows, not changed rows
                    client_flags=[ClientFlag.FOUND_ROWS],
                )
            except Error as e:
                raise DatabaseError(f"Failed to connect to MySQL: {e}", original_exception=e)
            self._local.connection = connection
        return connection

    def create_tables(self) -> None:
        """Creates the stock record table if it does not exist."""
        create_stock_table_query = f"""
        CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
            id BIGINT UNSIGNED PRIMARY KEY AUTO_INCREMENT,
            product_id BIGINT UNSIGNED NOT NULL,
            stock_quantity INT NOT NULL DEFAULT 0,
            reserved_quantity INT NOT NULL DEFAULT 0,
            min_stock_level INT NOT NULL DEFAULT 0,
            max_stock_level INT NOT NULL DEFAULT 1000,
            track_inventory TINYINT(1) NOT NULL DEFAULT 1,
            active TINYINT(1) NOT NULL DEFAULT 1,
            deleted TINYINT(1) NOT NULL DEFAULT 0,
            created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
            UNIQUE KEY uk_product_id (product_id),
            INDEX idx_stock_status (active, deleted, track_inventory),
            CONSTRAINT chk_stock_non_negative CHECK (stock_quantity >= 0),
            CONSTRAINT chk_reserved_non_negative CHECK (reserved_quantity >= 0),
            CONSTRAINT chk_reserved_within_stock CHECK (reserved_quantity <= stock_quantity)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
        """
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(create_stock_table_query)
            conn.commit()
            logger.info("Stock record table checked/created.")
        except Error as e:
            conn.rollback()
            raise DatabaseError(f"Error creating stock record table: {e}", original_exception=e)
        finally:
            cursor.close()

    def _execute_write(self, query: str, params: tuple, description: str) -> int:
        """Runs one write statement in its own transaction and returns the affected-row count."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(query, params)
            affected_rows = cursor.rowcount
            conn.commit()
            logger.debug(f"{description}: {affected_rows} row(s) affected")
            return affected_rows
        except Error as e:
            conn.rollback()
            raise DatabaseError(f"Error during {description}: {e}", original_exception=e)
        finally:
            cursor.close()

    def _fetch(self, query: str, params: tuple, description: str, fetch_one: bool = False, dictionary: bool = True):
        """Runs one read statement and ends its transaction so the next read sees fresh data."""
        conn = self._get_connection()
        cursor = conn.cursor(dictionary=dictionary)
        try:
            cursor.execute(query, params)
            result = cursor.fetchone() if fetch_one else cursor.fetchall()
            conn.commit()
            return result
        except Error as e:
            conn.rollback()
            raise DatabaseError(f"Error {description}: {e}", original_exception=e)
        finally:
            cursor.close()

    # --- conditional mutations ---

    def reserve_stock(self, product_id: int, quantity: int) -> int:
        return self._execute_write(
            RESERVE_STOCK_QUERY,
            (quantity, product_id, quantity),
            f"reserve of {quantity} for product {product_id}",
        )

    def release_reserved_stock(self, product_id: int, quantity: int) -> int:
        return self._execute_write(
            RELEASE_RESERVED_STOCK_QUERY,
            (quantity, product_id, quantity),
            f"release of {quantity} for product {product_id}",
        )

    def reduce_stock(self, product_id: int, quantity: int) -> int:
        return self._execute_write(
            REDUCE_STOCK_QUERY,
            (quantity, quantity, product_id, quantity, quantity),
            f"reduction of {quantity} for product {product_id}",
        )

    def update_stock_quantity(self, product_id: int, quantity: int) -> int:
        return self._execute_write(
            UPDATE_STOCK_QUANTITY_QUERY,
            (quantity, product_id, quantity),
            f"stock update to {quantity} for product {product_id}",
        )

    # --- lifecycle ---

    def create_stock_record(self, record: StockRecord) -> StockRecord:
        """Inserts a new stock record and returns it with its database id."""
        insert_query = f"""
        INSERT INTO {TABLE_NAME}
        (product_id, stock_quantity, reserved_quantity, min_stock_level, max_stock_level,
         track_inventory, active, deleted)
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
        """
        params = (
            record.product_id,
            record.stock_quantity,
            record.reserved_quantity,
            record.min_stock_level,
            record.max_stock_level,
            int(record.track_inventory),
            int(record.active),
            int(record.deleted),
        )

        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(insert_query, params)
            record.id = cursor.lastrowid
            conn.commit()
            logger.info(f"Stock record created for product {record.product_id} with {record.stock_quantity} units")
            return record
        except Error as e:
            conn.rollback()
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise DuplicateStockRecordError(record.product_id, original_exception=e)
            raise DatabaseError(
                f"Error creating stock record for product {record.product_id}: {e}", original_exception=e
            )
        finally:
            cursor.close()

    def soft_delete_by_product_id(self, product_id: int) -> int:
        return self._execute_write(
            f"UPDATE {TABLE_NAME} SET deleted = 1 WHERE product_id = %s AND deleted = 0",
            (product_id,),
            f"soft delete of stock record for product {product_id}",
        )

    def delete_by_product_id(self, product_id: int) -> int:
        return self._execute_write(
            f"DELETE FROM {TABLE_NAME} WHERE product_id = %s",
            (product_id,),
            f"removal of stock record for product {product_id}",
        )

    # --- reads ---

    def get_by_product_id(self, product_id: int) -> Optional[StockRecord]:
        row = self._fetch(
            f"SELECT {RECORD_COLUMNS} FROM {TABLE_NAME} WHERE product_id = %s LIMIT 1",
            (product_id,),
            f"fetching stock record for product {product_id}",
            fetch_one=True,
        )
        return StockRecord.from_row(row) if row else None

    def get_by_product_ids(self, product_ids: list[int]) -> list[StockRecord]:
        if not product_ids:
            return []

        placeholders = ",".join(["%s"] * len(product_ids))
        rows = self._fetch(
            f"SELECT {RECORD_COLUMNS} FROM {TABLE_NAME} WHERE product_id IN ({placeholders})",
            tuple(product_ids),
            f"fetching stock records for {len(product_ids)} products",
        )
        return [StockRecord.from_row(row) for row in rows]

    def has_available_stock(self, product_id: int, quantity: int) -> bool:
        row = self._fetch(
            f"SELECT (stock_quantity - reserved_quantity) >= %s AS has_stock FROM {TABLE_NAME} "
            "WHERE product_id = %s AND active = 1 AND deleted = 0",
            (quantity, product_id),
            f"checking available stock for product {product_id}",
            fetch_one=True,
        )
        return bool(row and row["has_stock"])

    def _find(self, condition: str, params: tuple, description: str) -> list[StockRecord]:
        rows = self._fetch(
            f"SELECT {RECORD_COLUMNS} FROM {TABLE_NAME} WHERE {condition} ORDER BY product_id",
            params,
            description,
        )
        return [StockRecord.from_row(row) for row in rows]

    def find_in_stock_items(self) -> list[StockRecord]:
        return self._find(
            f"(stock_quantity - reserved_quantity) > 0 AND {LIVE_TRACKED_PREDICATE}", (), "fetching in-stock items"
        )

    def find_low_stock_items(self) -> list[StockRecord]:
        return self._find(
            f"stock_quantity <= min_stock_level AND {LIVE_TRACKED_PREDICATE}", (), "fetching low-stock items"
        )

    def find_out_of_stock_items(self) -> list[StockRecord]:
        return self._find(f"stock_quantity <= 0 AND {LIVE_TRACKED_PREDICATE}", (), "fetching out-of-stock items")

    def find_by_stock_quantity_between(self, min_stock: int, max_stock: int) -> list[StockRecord]:
        return self._find(
            "stock_quantity BETWEEN %s AND %s AND active = 1 AND deleted = 0",
            (min_stock, max_stock),
            f"fetching items with stock between {min_stock} and {max_stock}",
        )

    def _count(self, condition: str, description: str) -> int:
        row = self._fetch(
            f"SELECT COUNT(*) FROM {TABLE_NAME} WHERE {condition}",
            (),
            description,
            fetch_one=True,
            dictionary=False,
        )
        return int(row[0]) if row else 0

    def count_in_stock_products(self) -> int:
        return self._count(
            f"(stock_quantity - reserved_quantity) > 0 AND {LIVE_TRACKED_PREDICATE}", "counting in-stock products"
        )

    def count_low_stock_products(self) -> int:
        return self._count(
            f"stock_quantity <= min_stock_level AND {LIVE_TRACKED_PREDICATE}", "counting low-stock products"
        )

    def count_out_of_stock_products(self) -> int:
        return self._count(f"stock_quantity <= 0 AND {LIVE_TRACKED_PREDICATE}", "counting out-of-stock products")

    def close(self) -> None:
        """Closes the calling thread's connection."""
        connection = getattr(self._local, "connection", None)
        if connection and connection.is_connected():
            connection.close()
        self._local.connection = None

    def __del__(self) -> None:
        """Closes the database connection when the object is destroyed."""
        local = getattr(self, "_local", None)
        connection = getattr(local, "connection", None) if local is not None else None
        if connection is not None and connection.is_connected():
            connection.close()
