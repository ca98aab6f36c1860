# backend/routes/cart.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import role_required
from utils.audit import write_log
from models.users import User, ROLE_CUSTOMER
from schemas.cart import CartAddItem, CartUpdateItem, CartOut
from services.cart_store import CartStore

router = APIRouter(prefix="/api/cart", tags=["Cart"])

customer_only = role_required(ROLE_CUSTOMER)

def _client_ip(request: Request):
    return request.client.host if request.client else None

@router.get("", response_model=CartOut)
def get_cart(
    db: Session = Depends(get_db),
    current_user: User = Depends(customer_only)
):
    return CartStore(db).list_items(current_user)

@router.post("/add", response_model=CartOut, status_code=status.HTTP_200_OK)
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(customer_only)
):
    out = CartStore(db).add_item(current_user, payload.item_id, payload.quantity)

    # Log cart add action
    write_log(
        db,
        user_id=current_user.id,
        action="CART_ADD",
        resource="cart",
        status="SUCCESS",
        ip=_client_ip(request),
        meta={"medicine_id": payload.item_id, "quantity": payload.quantity, "cart_items": len(out.items), "total": out.total},
    )
    return out

@router.put("/update", response_model=CartOut)
def update_cart_item(
    payload: CartUpdateItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(customer_only)
):
    out = CartStore(db).set_quantity(current_user, payload.item_id, payload.quantity)

    write_log(
        db,
        user_id=current_user.id,
        action="CART_UPDATE",
        resource="cart",
        status="SUCCESS",
        ip=_client_ip(request),
        meta={"medicine_id": payload.item_id, "quantity": payload.quantity, "total": out.total},
    )
    return out

@router.delete("/{item_id}", response_model=CartOut)
def delete_cart_item(
    item_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(customer_only)
):
    out = CartStore(db).remove_item(current_user, item_id)

    write_log(
        db,
        user_id=current_user.id,
        action="CART_DELETE",
        resource="cart",
        status="SUCCESS",
        ip=_client_ip(request),
        meta={"medicine_id": item_id, "cart_items": len(out.items), "total": out.total},
    )
    return out
