"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Validation (request payloads, filters, sorting)
  2xxx: Order
  3xxx: Customer
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Validation ---

class ValidationError(AppError):
    def __init__(self, detail: str, code: int = 1001) -> None:
        super().__init__(code, detail, 422)


class InvalidFilterError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"Invalid filter: {detail}", code=1002)


class InvalidSortError(ValidationError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Invalid sort field: {field}", code=1003)


# --- 2xxx: Order ---

class NotFoundError(AppError):
    def __init__(self, message: str, code: int = 2001) -> None:
        super().__init__(code, message, 404)


class OrderNotFoundError(NotFoundError):
    def __init__(self, sns: list[int] | int) -> None:
        if isinstance(sns, int):
            sns = [sns]
        joined = ", ".join(str(sn) for sn in sns)
        super().__init__(f"Order not found: {joined}", code=2001)


class NoOrderToEvictError(AppError):
    def __init__(self) -> None:
        super().__init__(2002, "No existing order to replace; seed the table first", 409)


# --- 3xxx: Customer ---

class CustomerNotFoundError(NotFoundError):
    def __init__(self) -> None:
        super().__init__("Customer not found", code=3001)


class ConflictError(AppError):
    def __init__(self, message: str, code: int = 3002) -> None:
        super().__init__(code, message, 409)


class DuplicateCustomerError(ConflictError):
    def __init__(self) -> None:
        super().__init__(
            "A customer with this name already exists "
            "(customer names are case-insensitive)"
        )


# --- 9xxx: System ---

class PersistenceError(AppError):
    """Wraps storage failures; the original cause is logged, never returned."""

    def __init__(self, detail: str = "Failed to save changes, please try again") -> None:
        super().__init__(9001, detail, 500)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
