# backend/services/cart_store.py
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from exceptions import CartItemNotFound, InvalidQuantity, MedicineNotFound
from models.cart import Cart, CartItem
from models.medicine import Medicine
from schemas.cart import CartItemOut, CartOut

logger = logging.getLogger(__name__)


class CartStore:
    """
    Per-customer cart: medicine -> quantity.

    Holds no stock rules; availability is enforced only at checkout.
    Writes for one customer are serialized by the database: the cart row is
    locked with SELECT ... FOR UPDATE and quantities change in SQL, so two
    requests never overwrite each other's update. Customers never block each
    other.
    """

    def __init__(self, db: Session):
        self.db = db

    def _find_cart(self, user_id: int, for_update: bool = False) -> Optional[Cart]:
        q = self.db.query(Cart).filter(Cart.user_id == user_id)
        if for_update:
            q = q.with_for_update()
        return q.first()

    def _get_or_create_cart(self, user_id: int) -> Cart:
        cart = self._find_cart(user_id, for_update=True)
        if not cart:
            cart = Cart(user_id=user_id)
            self.db.add(cart)
            self.db.flush()
        return cart

    def _increment(self, user_id: int, medicine_id: int, quantity: int) -> None:
        cart = self._get_or_create_cart(user_id)
        result = self.db.execute(
            update(CartItem)
            .where(CartItem.cart_id == cart.id, CartItem.medicine_id == medicine_id)
            .values(quantity=CartItem.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.add(CartItem(cart_id=cart.id, medicine_id=medicine_id, quantity=quantity))
            self.db.flush()

    def add_item(self, user, medicine_id: int, quantity: Optional[int] = None) -> CartOut:
        if quantity is None:
            quantity = 1
        if quantity < 1:
            raise InvalidQuantity(quantity)

        if self.db.get(Medicine, medicine_id) is None:
            raise MedicineNotFound(medicine_id)

        try:
            self._increment(user.id, medicine_id, quantity)
            self.db.commit()
        except IntegrityError:
            # A concurrent request created the cart or the line first
            self.db.rollback()
            self._increment(user.id, medicine_id, quantity)
            self.db.commit()

        logger.debug("Cart of user %s: +%s x medicine %s", user.id, quantity, medicine_id)
        return self.list_items(user)

    def set_quantity(self, user, medicine_id: int, quantity: int) -> CartOut:
        if quantity is None or quantity < 1:
            raise InvalidQuantity(quantity)

        cart = self._find_cart(user.id, for_update=True)
        updated = 0
        if cart:
            updated = self.db.execute(
                update(CartItem)
                .where(CartItem.cart_id == cart.id, CartItem.medicine_id == medicine_id)
                .values(quantity=quantity)
                .execution_options(synchronize_session=False)
            ).rowcount
        if not updated:
            self.db.rollback()
            raise CartItemNotFound(medicine_id)
        self.db.commit()

        return self.list_items(user)

    def remove_item(self, user, medicine_id: int) -> CartOut:
        # Removing an absent line is not an error
        cart = self._find_cart(user.id, for_update=True)
        if cart:
            self.db.execute(
                delete(CartItem)
                .where(CartItem.cart_id == cart.id, CartItem.medicine_id == medicine_id)
                .execution_options(synchronize_session=False)
            )
        self.db.commit()

        return self.list_items(user)

    def lines(self, user_id: int, for_update: bool = False) -> List[CartItem]:
        cart = self._find_cart(user_id, for_update=for_update)
        if not cart:
            return []
        # Always a fresh read; quantities are changed with SQL updates
        return (
            self.db.query(CartItem)
            .filter(CartItem.cart_id == cart.id)
            .order_by(CartItem.id)
            .populate_existing()
            .all()
        )

    def list_items(self, user) -> CartOut:
        # Read-only join with the live medicine snapshot; reserves nothing
        items_out = []
        total = Decimal("0")
        for it in self.lines(user.id):
            med = it.medicine
            price = Decimal(med.price) if med else Decimal("0")
            line_total = price * it.quantity
            total += line_total
            items_out.append(CartItemOut(
                medicine_id=it.medicine_id,
                name=med.name if med else "",
                image=med.image if med else None,
                price=float(price),
                quantity=it.quantity,
                line_total=float(line_total),
            ))
        return CartOut(items=items_out, total=float(total))

    def clear(self, user_id: int) -> None:
        # Joins the caller's transaction; the checkout commit makes it durable
        cart = self._find_cart(user_id, for_update=True)
        if cart:
            self.db.execute(
                delete(CartItem)
                .where(CartItem.cart_id == cart.id)
                .execution_options(synchronize_session=False)
            )
