# backend/services/order_ledger.py
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Iterable, Optional, Set

from sqlalchemy.orm import Session, joinedload

from exceptions import InvalidStatusTransition, OrderNotFound
from models.order import Order, OrderItem, PAYMENT_COMPLETED
from models.users import ROLE_ADMIN, ROLE_PHARMACY
from utils.audit import write_log

logger = logging.getLogger(__name__)

DELIVERY_WINDOW = timedelta(days=5)

# Allowed delivery status changes; cancellation only before shipping
STATUS_TRANSITIONS: Dict[str, Set[str]] = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"shipped", "cancelled"},
    "shipped": {"delivered"},
    "delivered": set(),
    "cancelled": set(),
}


def can_transition(current: str, new: str) -> bool:
    return new in STATUS_TRANSITIONS.get(current, set())


class OrderLedger:
    """Durable record of paid orders. Append-only apart from status changes."""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Order).options(
            joinedload(Order.items).joinedload(OrderItem.medicine)
        )

    def create(self, *, user_id: int, lines: Iterable, address, gateway_order_id: str,
               gateway_payment_id: str) -> Order:
        """
        Adds an order built from cart lines to the caller's transaction.

        ``lines`` are cart items with a loaded ``medicine``; each line's price
        is copied onto the order at this moment.
        """
        items = []
        total = Decimal("0")
        for line in lines:
            price = Decimal(line.medicine.price)
            total += price * line.quantity
            items.append(OrderItem(
                medicine_id=line.medicine_id,
                quantity=line.quantity,
                price_at_purchase=price,
            ))

        order = Order(
            user_id=user_id,
            total_price=total,
            payment_status=PAYMENT_COMPLETED,
            delivery_status="pending",
            gateway_order_id=gateway_order_id,
            gateway_payment_id=gateway_payment_id,
            expected_delivery_date=datetime.now(timezone.utc) + DELIVERY_WINDOW,
            items=items,
            **address.model_dump(),
        )
        self.db.add(order)
        self.db.flush()
        return order

    def find_by_id(self, order_id: int) -> Optional[Order]:
        return self._query().filter(Order.id == order_id).first()

    def find_by_payment_id(self, gateway_payment_id: str) -> Optional[Order]:
        return self._query().filter(Order.gateway_payment_id == gateway_payment_id).first()

    def find_for_viewer(self, user, order_id: int) -> Order:
        # Customers only see their own orders; pharmacies and admins see all
        order = self.find_by_id(order_id)
        if not order:
            raise OrderNotFound(order_id)
        if order.user_id != user.id and user.role not in (ROLE_PHARMACY, ROLE_ADMIN):
            raise OrderNotFound(order_id)
        return order

    def find_by_customer(self, user_id: int, page: int = 1, page_size: int = 10):
        q = self.db.query(Order).filter(Order.user_id == user_id)
        total = q.count()
        rows = (
            self._query()
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return rows, total

    def list_all(self, page: int = 1, page_size: int = 10):
        total = self.db.query(Order).count()
        rows = (
            self._query()
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return rows, total

    def update_status(self, user, order_id: int, new_status: str, ip: Optional[str] = None) -> Order:
        order = self.db.query(Order).filter(Order.id == order_id).with_for_update().first()
        if not order:
            raise OrderNotFound(order_id)

        old_status = order.delivery_status
        if not can_transition(old_status, new_status):
            self.db.rollback()
            raise InvalidStatusTransition(old_status, new_status)

        order.delivery_status = new_status
        write_log(self.db, user_id=user.id, action="ORDER_STATUS_CHANGE", resource="orders", status="SUCCESS",
                  ip=ip, meta={"order_id": order.id, "old": old_status, "new": new_status}, commit=False)
        self.db.commit()
        logger.info("Order %s status %s -> %s by user %s", order.id, old_status, new_status, user.id)
        return self.find_by_id(order.id)
