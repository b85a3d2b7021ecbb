from typing import Optional


class ShopError(Exception):
    """Base class for errors the checkout domain reports back to the caller."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidQuantity(ShopError):
    pass


class InvalidPaymentMethod(ShopError):
    pass


class ItemNotFound(ShopError):
    status_code = 404

    def __init__(self, sku: str):
        super().__init__(f"Item not found: {sku}")
        self.sku = sku


class EmptyCart(ShopError):
    status_code = 409

    def __init__(self, user_id: str):
        super().__init__("Cart is empty")
        self.user_id = user_id


class InsufficientStock(ShopError):
    status_code = 409

    def __init__(self, sku: str, requested: int, available: int):
        super().__init__(
            f"Not enough stock for {sku}: requested={requested}, available={available}"
        )
        self.sku = sku
        self.requested = requested
        self.available = available


class StockUnderflow(ShopError):
    status_code = 409

    def __init__(self, sku: str, delta: int):
        super().__init__(f"Stock for {sku} cannot be adjusted by {delta} below zero")
        self.sku = sku
        self.delta = delta


class IdempotencyConflict(ShopError):
    status_code = 409


class TransientStoreError(ShopError):
    """Storage or lock unavailable; the same request may be retried."""

    status_code = 503

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
