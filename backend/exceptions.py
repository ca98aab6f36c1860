"""Domain exceptions for the pharmacy checkout backend.

Every exception carries a machine readable ``code`` and the HTTP status the
API answers with. Checkout rejections use the name of the state the checkout
ended in as their code.
"""
from typing import Any, Dict, List, Optional


class StoreError(Exception):
    """Base class for all store exceptions."""

    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code}


# ---- Cart / inventory ----

class InvalidQuantity(StoreError):
    def __init__(self, quantity: int):
        super().__init__(f"Quantity must be at least 1, got {quantity}", code="INVALID_QUANTITY", status_code=400)


class MedicineNotFound(StoreError):
    def __init__(self, medicine_id: int):
        super().__init__(f"Medicine {medicine_id} not found", code="MEDICINE_NOT_FOUND", status_code=404)


class CartItemNotFound(StoreError):
    def __init__(self, medicine_id: int):
        super().__init__("Item not found in cart", code="CART_ITEM_NOT_FOUND", status_code=404)
        self.medicine_id = medicine_id


class InvalidStockAdjustment(StoreError):
    def __init__(self, message: str):
        super().__init__(message, code="INVALID_STOCK_ADJUSTMENT", status_code=400)


class Forbidden(StoreError):
    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, code="FORBIDDEN", status_code=403)


# ---- Checkout ----

class CheckoutError(StoreError):
    """Raised when a checkout ends in one of its failure states."""


class EmptyCart(CheckoutError):
    def __init__(self):
        super().__init__("Cart is empty", code="REJECTED_EMPTY_CART", status_code=400)


class InvalidAddress(CheckoutError):
    def __init__(self, missing: List[str]):
        super().__init__(
            "Delivery address is incomplete: missing " + ", ".join(missing),
            code="REJECTED_INVALID_ADDRESS",
            status_code=400,
        )
        self.missing = missing

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["missing"] = self.missing
        return out


class InsufficientStock(CheckoutError):
    """Carries one shortage per offending line: id, name, requested and available."""

    def __init__(self, shortages: List[Dict[str, Any]]):
        names = ", ".join(f"{s['name']} (available {s['available']})" for s in shortages)
        super().__init__(f"Insufficient stock for: {names}", code="REJECTED_INSUFFICIENT_STOCK", status_code=400)
        self.shortages = shortages

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["shortages"] = self.shortages
        return out


class BadSignature(CheckoutError):
    def __init__(self):
        super().__init__("Payment verification failed", code="REJECTED_BAD_SIGNATURE", status_code=400)


class UnknownIntent(CheckoutError):
    def __init__(self, gateway_order_id: str):
        super().__init__("Payment order not found", code="REJECTED_UNKNOWN_INTENT", status_code=404)
        self.gateway_order_id = gateway_order_id


class CartChanged(CheckoutError):
    def __init__(self, paid, current):
        super().__init__(
            "Cart changed after payment was started; please contact support",
            code="REJECTED_CART_CHANGED",
            status_code=409,
        )
        self.paid = paid
        self.current = current


class GatewayFailure(CheckoutError):
    def __init__(self, message: str = "Payment service unavailable, please try again"):
        super().__init__(message, code="FAILED_GATEWAY", status_code=502)


class PersistenceFailure(CheckoutError):
    def __init__(self):
        super().__init__("Order could not be completed", code="FAILED_PERSISTENCE", status_code=500)


# ---- Payment gateway adapter ----

class GatewayError(Exception):
    """Raised by the gateway adapter when the provider rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


# ---- Orders ----

class OrderNotFound(StoreError):
    def __init__(self, order_id: int):
        super().__init__("Order not found", code="ORDER_NOT_FOUND", status_code=404)
        self.order_id = order_id


class InvalidStatusTransition(StoreError):
    def __init__(self, current: str, requested: str):
        super().__init__(
            f"Cannot change status from {current} to {requested}",
            code="INVALID_STATUS_TRANSITION",
            status_code=400,
        )
        self.current = current
        self.requested = requested
