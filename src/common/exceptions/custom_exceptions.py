"""Custom application-wide exceptions.

Business-rule failures of stock operations (insufficient stock, invalid release, ...)
are not exceptions; they are returned as ``StockOperationResult`` outcomes. The
classes below cover infrastructure failures only.
"""


class ApplicationError(Exception):
    """Base class for application-specific errors."""

    def __init__(
        self, message: str = "An application error occurred", original_exception: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_exception = original_exception
        self.message = message

    def __str__(self) -> str:
        if self.original_exception:
            return f"{self.message} (Original error: {self.original_exception})"
        return self.message


class APIError(ApplicationError):
    """Raised when a call to the product catalog API fails."""

    def __init__(
        self,
        message: str = "Catalog API call failed",
        original_exception: Exception | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, original_exception)
        self.status_code = status_code
        self.message = f"API Error: {message}"
        if status_code:
            self.message += f" (Status Code: {status_code})"


class DatabaseError(ApplicationError):
    """Raised when a statement against the stock store fails at the driver level."""

    def __init__(self, message: str = "Database operation failed", original_exception: Exception | None = None) -> None:
        super().__init__(message, original_exception)
        self.message = f"Database Error: {message}"


class DuplicateStockRecordError(DatabaseError):
    """Raised when a stock record is inserted for a product that already owns one."""

    def __init__(self, product_id: int, original_exception: Exception | None = None) -> None:
        super().__init__(f"Stock record for product {product_id} already exists", original_exception)
        self.product_id = product_id
