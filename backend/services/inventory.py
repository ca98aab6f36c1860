# backend/services/inventory.py
import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.orm import Session

from exceptions import Forbidden, InsufficientStock, InvalidStockAdjustment, MedicineNotFound
from models.medicine import Medicine
from models.stock import StockMovement, MOVEMENT_ADJUSTMENT, MOVEMENT_IN, MOVEMENT_OUT
from models.users import ROLE_ADMIN

logger = logging.getLogger(__name__)

# (medicine_id, quantity)
Line = Tuple[int, int]


class Availability(NamedTuple):
    ok: bool
    shortages: List[dict]


def _merge(lines: Iterable[Line]) -> "OrderedDict[int, int]":
    merged: "OrderedDict[int, int]" = OrderedDict()
    for medicine_id, qty in lines:
        merged[medicine_id] = merged.get(medicine_id, 0) + qty
    return merged


class InventoryLedger:
    """Authoritative stock per medicine and the only code that changes it."""

    def __init__(self, db: Session):
        self.db = db

    def fresh_medicines(self, ids: Iterable[int]) -> Dict[int, Medicine]:
        # populate_existing overwrites anything the session already holds
        ids = list(ids)
        if not ids:
            return {}
        rows = (
            self.db.query(Medicine)
            .filter(Medicine.id.in_(ids))
            .populate_existing()
            .all()
        )
        return {m.id: m for m in rows}

    def check_availability(self, lines: Iterable[Line]) -> Availability:
        wanted = _merge(lines)
        medicines = self.fresh_medicines(wanted.keys())
        shortages = []
        for medicine_id, requested in wanted.items():
            med = medicines.get(medicine_id)
            available = med.stock_quantity if med else 0
            if requested > available:
                shortages.append({
                    "medicine_id": medicine_id,
                    "name": med.name if med else f"#{medicine_id}",
                    "requested": requested,
                    "available": available,
                })
        return Availability(ok=not shortages, shortages=shortages)

    def decrement(self, lines: Iterable[Line], *, user_id: int, order_id: int) -> None:
        """
        Conditionally decrements every line inside the caller's transaction.

        Each UPDATE only applies while stock_quantity >= quantity. When a line
        fails InsufficientStock is raised and the caller must roll back, which
        also undoes the lines already decremented.
        """
        for medicine_id, qty in _merge(lines).items():
            result = self.db.execute(
                update(Medicine)
                .where(Medicine.id == medicine_id, Medicine.stock_quantity >= qty)
                .values(stock_quantity=Medicine.stock_quantity - qty)
            )
            if result.rowcount != 1:
                med = self.fresh_medicines([medicine_id]).get(medicine_id)
                raise InsufficientStock([{
                    "medicine_id": medicine_id,
                    "name": med.name if med else f"#{medicine_id}",
                    "requested": qty,
                    "available": med.stock_quantity if med else 0,
                }])
            self.db.add(StockMovement(
                medicine_id=medicine_id, user_id=user_id, qty=-qty,
                type=MOVEMENT_OUT, reason=f"Order #{order_id}", order_id=order_id,
            ))
        self.db.flush()

    def restock(self, user, medicine_id: int, delta: int, reason: Optional[str] = None) -> StockMovement:
        if delta == 0:
            raise InvalidStockAdjustment("Quantity change must not be zero")

        med = self.db.get(Medicine, medicine_id)
        if med is None:
            raise MedicineNotFound(medicine_id)
        if user.role != ROLE_ADMIN and med.pharmacy_id != user.id:
            raise Forbidden("Medicine belongs to another pharmacy")

        # Same conditional form as checkout so a correction can never go below zero
        result = self.db.execute(
            update(Medicine)
            .where(Medicine.id == medicine_id, Medicine.stock_quantity + delta >= 0)
            .values(stock_quantity=Medicine.stock_quantity + delta)
        )
        if result.rowcount != 1:
            self.db.rollback()
            raise InvalidStockAdjustment("Stock quantity cannot be negative")

        movement = StockMovement(
            medicine_id=medicine_id, user_id=user.id, qty=delta,
            type=MOVEMENT_IN if delta > 0 else MOVEMENT_ADJUSTMENT,
            reason=reason or ("Restock" if delta > 0 else "Correction"),
        )
        self.db.add(movement)
        self.db.commit()
        self.db.refresh(movement)
        logger.info("Stock of medicine %s changed by %s (user %s)", medicine_id, delta, user.id)
        return movement

    def movements(self, user, medicine_id: Optional[int] = None, page: int = 1, page_size: int = 20):
        query = self.db.query(StockMovement).join(Medicine)
        if user.role != ROLE_ADMIN:
            query = query.filter(Medicine.pharmacy_id == user.id)
        if medicine_id is not None:
            query = query.filter(StockMovement.medicine_id == medicine_id)
        query = query.order_by(StockMovement.id.desc())
        total = query.count()
        rows = query.offset((page - 1) * page_size).limit(page_size).all()
        return rows, total
