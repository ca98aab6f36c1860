# backend/routes/stock.py
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import Optional

from database import get_db
from models.medicine import Medicine
from models.users import User, ROLE_ADMIN, ROLE_PHARMACY
from services.inventory import InventoryLedger
from utils.tokenJWT import role_required
from utils.audit import write_log
import schemas.stock as stock_schemas

router = APIRouter(prefix="/api/stock", tags=["Stock"])

staff_only = role_required(ROLE_PHARMACY, ROLE_ADMIN)


def _movement_out(m, stock_quantity=None):
    return {
        "id": m.id,
        "created_at": m.created_at,
        "medicine_id": m.medicine_id,
        "medicine_name": m.medicine.name if m.medicine else "Unknown",
        "qty": m.qty,
        "type": m.type,
        "reason": m.reason,
        "order_id": m.order_id,
        "user_id": m.user_id,
        "stock_quantity": stock_quantity,
    }


@router.get("", response_model=stock_schemas.StockMovementPage)
def list_movements(
    medicine_id: Optional[int] = Query(None, alias="medicineId"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_only),
):
    rows, total = InventoryLedger(db).movements(current_user, medicine_id, page, page_size)
    return {"items": [_movement_out(m) for m in rows], "total": total, "page": page, "page_size": page_size}


@router.post("/adjust", response_model=stock_schemas.StockMovementResponse)
def adjust_stock(
    payload: stock_schemas.StockAdjust,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_only),
):
    movement = InventoryLedger(db).restock(current_user, payload.medicine_id, payload.qty, payload.reason)
    stock_quantity = db.query(Medicine.stock_quantity).filter(Medicine.id == payload.medicine_id).scalar()
    write_log(db, user_id=current_user.id, action="STOCK_ADJUSTMENT", resource="stock", status="SUCCESS",
              ip=request.client.host if request.client else None,
              meta={"movement_id": movement.id, "medicine_id": payload.medicine_id, "qty": payload.qty})
    db.refresh(movement)
    return _movement_out(movement, stock_quantity)
