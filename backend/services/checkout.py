# backend/services/checkout.py
"""
Checkout orchestration: cart -> payment intent -> verified callback -> order.

The flow spans two requests. ``begin_checkout`` validates the cart and opens
a gateway order (cart review -> intent created). ``verify_payment`` checks the
signed callback and commits the order (payment verified -> order committed).
Between the two only a CheckoutIntent row exists.

Commit is a single transaction: stock decrement, order insert, cart clear and
intent completion succeed together or are rolled back together. Concurrent
callbacks are serialized by the database: the intent row is locked for the
commit and ``gateway_payment_id`` is unique on orders.
"""
import logging
import time
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple

import httpx
from pydantic import ValidationError
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from exceptions import (
    BadSignature, CartChanged, CheckoutError, EmptyCart, GatewayError, GatewayFailure,
    InsufficientStock, InvalidAddress, PersistenceFailure, UnknownIntent,
)
from models.cart import CartItem
from models.checkout import CheckoutIntent, INTENT_COMPLETED, INTENT_CREATED, INTENT_FAILED
from models.order import Order
from schemas.payment import CheckoutStarted, DeliveryAddress, DeliveryAddressIn
from services.cart_store import CartStore
from services.inventory import InventoryLedger
from services.order_ledger import OrderLedger
from utils.audit import write_log
from utils.signature import verify_payment_signature

logger = logging.getLogger(__name__)


def to_minor_units(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def validate_address(address: Optional[DeliveryAddressIn]) -> DeliveryAddress:
    data = address.model_dump() if address is not None else {}
    try:
        return DeliveryAddress(**data)
    except ValidationError as e:
        missing = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise InvalidAddress(missing) from e


def staged_lines(items: List[CartItem]) -> List[List[int]]:
    return sorted([it.medicine_id, it.quantity] for it in items)


class CheckoutOrchestrator:
    def __init__(self, db: Session, gateway=None, currency: Optional[str] = None):
        self.db = db
        self.gateway = gateway
        self.currency = currency or settings.CURRENCY
        self.carts = CartStore(db)
        self.inventory = InventoryLedger(db)
        self.orders = OrderLedger(db)

    # ---- helpers ----

    @staticmethod
    def _as_lines(items: List[CartItem]) -> List[Tuple[int, int]]:
        return [(it.medicine_id, it.quantity) for it in items]

    def _priced_total(self, items: List[CartItem]) -> Decimal:
        # Prices come from a fresh read, never from what the session cached
        medicines = self.inventory.fresh_medicines(it.medicine_id for it in items)
        total = Decimal("0")
        for it in items:
            total += Decimal(medicines[it.medicine_id].price) * it.quantity
        return total.quantize(Decimal("0.01"))

    def _validate_stock(self, items: List[CartItem]) -> None:
        availability = self.inventory.check_availability(self._as_lines(items))
        if not availability.ok:
            raise InsufficientStock(availability.shortages)

    # ---- cart review -> intent created ----

    async def begin_checkout(self, user, address_in: Optional[DeliveryAddressIn], ip: Optional[str] = None) -> CheckoutStarted:
        user_id = user.id
        items = self.carts.lines(user_id)
        if not items:
            raise EmptyCart()

        address = validate_address(address_in)

        try:
            self._validate_stock(items)
        except InsufficientStock as e:
            logger.info("Checkout for user %s rejected, shortages: %s", user_id, e.shortages)
            raise

        total = self._priced_total(items)
        amount_minor = to_minor_units(total)
        lines = staged_lines(items)

        # Nothing is written before the gateway answers; no transaction stays open across the call
        self.db.rollback()
        try:
            intent = await self.gateway.create_intent(
                amount_minor,
                self.currency,
                {"receipt": f"rcpt_{user_id}_{int(time.time())}", "customer_id": user_id},
            )
        except (httpx.HTTPError, GatewayError) as e:
            logger.error("Payment intent creation failed for user %s: %s", user_id, e)
            raise GatewayFailure() from e

        record = CheckoutIntent(
            user_id=user_id,
            gateway_order_id=intent.intent_id,
            amount=total,
            amount_minor=amount_minor,
            currency=self.currency,
            delivery_address=address.model_dump(),
            lines=lines,
            status=INTENT_CREATED,
        )
        self.db.add(record)
        write_log(self.db, user_id=user_id, action="CHECKOUT_START", resource="payment", status="SUCCESS", ip=ip,
                  meta={"gateway_order_id": intent.intent_id, "amount": amount_minor, "items": len(lines)},
                  commit=False)
        self.db.commit()
        logger.info("Checkout %s opened for user %s, amount %s %s", intent.intent_id, user_id, amount_minor, self.currency)

        return CheckoutStarted(
            gateway_order_id=intent.intent_id,
            amount=amount_minor,
            currency=self.currency,
            key_id=settings.RAZORPAY_KEY_ID,
        )

    # ---- payment verified -> order committed ----

    def verify_payment(self, user, gateway_order_id: str, gateway_payment_id: str, signature: str,
                       ip: Optional[str] = None) -> Tuple[Order, bool]:
        """
        Returns ``(order, created)``. ``created`` is False when the callback
        was already processed and the existing order is returned unchanged.
        """
        user_id = user.id
        if not verify_payment_signature(gateway_order_id, gateway_payment_id, signature):
            logger.warning("Payment signature mismatch: user=%s gateway_order=%s payment=%s",
                           user_id, gateway_order_id, gateway_payment_id)
            write_log(self.db, user_id=user_id, action="PAYMENT_VERIFY", resource="payment", status="FAIL", ip=ip,
                      meta={"gateway_order_id": gateway_order_id, "reason": "bad_signature"})
            raise BadSignature()

        existing = self.orders.find_by_payment_id(gateway_payment_id)
        if existing:
            return self._replayed(user_id, existing)

        # Locked until commit or rollback; a duplicate callback waits here
        intent = self.db.query(CheckoutIntent).filter(
            CheckoutIntent.gateway_order_id == gateway_order_id
        ).with_for_update().populate_existing().first()
        if not intent or intent.user_id != user_id:
            self.db.rollback()
            logger.warning("Verified callback for unknown gateway order %s (user %s)", gateway_order_id, user_id)
            raise UnknownIntent(gateway_order_id)

        if intent.status == INTENT_COMPLETED and intent.order_id:
            logger.warning("Payment %s arrived for already completed gateway order %s",
                           gateway_payment_id, gateway_order_id)
            return self.orders.find_by_id(intent.order_id), False

        intent_id = intent.id
        try:
            order = self._commit(user_id, intent, gateway_payment_id, ip)
        except (CheckoutError, SQLAlchemyError) as e:
            self.db.rollback()
            # A concurrent callback with the same payment id may have committed first
            existing = self.orders.find_by_payment_id(gateway_payment_id)
            if existing:
                return self._replayed(user_id, existing)
            if isinstance(e, CheckoutError):
                logger.error("Payment %s captured for gateway order %s but checkout was rejected: %s",
                             gateway_payment_id, gateway_order_id, e.code)
                self._mark_failed(intent_id, e.code)
                raise
            logger.exception("Order commit failed for payment %s", gateway_payment_id)
            self._mark_failed(intent_id, "FAILED_PERSISTENCE")
            raise PersistenceFailure() from e

        return order, True

    def _commit(self, user_id: int, intent: CheckoutIntent, gateway_payment_id: str, ip: Optional[str]) -> Order:
        # The cart may have changed since the intent was created; re-validate it
        items = self.carts.lines(user_id, for_update=True)
        if not items:
            raise EmptyCart()

        self._validate_stock(items)

        total = self._priced_total(items)
        if staged_lines(items) != intent.lines or total != Decimal(intent.amount).quantize(Decimal("0.01")):
            raise CartChanged(paid=intent.amount, current=total)

        address = DeliveryAddress(**intent.delivery_address)

        order = self.orders.create(
            user_id=user_id,
            lines=items,
            address=address,
            gateway_order_id=intent.gateway_order_id,
            gateway_payment_id=gateway_payment_id,
        )
        self.inventory.decrement(self._as_lines(items), user_id=user_id, order_id=order.id)
        self.carts.clear(user_id)

        intent.status = INTENT_COMPLETED
        intent.order_id = order.id
        intent.failure_reason = None

        write_log(self.db, user_id=user_id, action="ORDER_COMMIT", resource="orders", status="SUCCESS", ip=ip,
                  meta={"order_id": order.id, "gateway_order_id": intent.gateway_order_id,
                        "gateway_payment_id": gateway_payment_id, "total": str(order.total_price)},
                  commit=False)
        self.db.commit()
        logger.info("Order %s committed for user %s (payment %s)", order.id, user_id, gateway_payment_id)
        return self.orders.find_by_id(order.id)

    def _replayed(self, user_id: int, order: Order) -> Tuple[Order, bool]:
        if order.user_id != user_id:
            logger.warning("Payment %s belongs to another customer (user %s)", order.gateway_payment_id, user_id)
            raise UnknownIntent(order.gateway_order_id)
        logger.info("Duplicate verification for payment %s, returning order %s", order.gateway_payment_id, order.id)
        return order, False

    def _mark_failed(self, intent_id: int, reason: str) -> None:
        # Funds were captured without an order; keep the reason for reconciliation.
        # Only a still open intent is marked, never one a concurrent commit completed.
        try:
            self.db.execute(
                update(CheckoutIntent)
                .where(CheckoutIntent.id == intent_id, CheckoutIntent.status == INTENT_CREATED)
                .values(status=INTENT_FAILED, failure_reason=reason)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Could not record failure of checkout intent %s", intent_id)
