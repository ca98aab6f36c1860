# backend/routes/orders.py
from typing import List
from fastapi import APIRouter, Depends, Request, Query
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_user, role_required
from models.users import User, ROLE_ADMIN, ROLE_PHARMACY
from models.order import Order
from schemas.order import OrderResponse, OrdersPage, OrderStatusPatch, OrderItemOut, OrderAddressOut
from services.order_ledger import OrderLedger

router = APIRouter(prefix="/api/orders", tags=["Orders"])

staff_only = role_required(ROLE_PHARMACY, ROLE_ADMIN)

# Map Order model to OrderResponse schema
def _order_to_out(order: Order) -> OrderResponse:
    items: List[OrderItemOut] = []
    for it in order.items:
        medicine_name = it.medicine.name if it.medicine else "Removed medicine"
        items.append(OrderItemOut(
            medicine_id=it.medicine_id,
            medicine_name=medicine_name,
            quantity=it.quantity,
            price_at_purchase=float(it.price_at_purchase),
            line_total=float(it.price_at_purchase * it.quantity),
        ))
    return OrderResponse(
        id=order.id,
        customer_id=order.user_id,
        total_price=float(order.total_price),
        payment_status=order.payment_status,
        delivery_status=order.delivery_status,
        gateway_order_id=order.gateway_order_id,
        gateway_payment_id=order.gateway_payment_id,
        created_at=order.created_at,
        expected_delivery_date=order.expected_delivery_date,
        delivery_address=OrderAddressOut(
            full_name=order.full_name,
            address_line1=order.address_line1,
            address_line2=order.address_line2,
            city=order.city,
            state=order.state,
            zip_code=order.zip_code,
            phone=order.phone,
        ),
        items=items,
    )


# List the current customer's orders, newest first
@router.get("", response_model=OrdersPage)
def list_my_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    rows, total = OrderLedger(db).find_by_customer(current_user.id, page, page_size)
    return {"items": [_order_to_out(o) for o in rows], "total": total, "page": page, "page_size": page_size}


# List every order (pharmacy/admin)
@router.get("/all", response_model=OrdersPage)
def list_all_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_only)
):
    rows, total = OrderLedger(db).list_all(page, page_size)
    return {"items": [_order_to_out(o) for o in rows], "total": total, "page": page, "page_size": page_size}


# Get details of a specific order
@router.get("/{order_id}", response_model=OrderResponse)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return _order_to_out(OrderLedger(db).find_for_viewer(current_user, order_id))


# Delivery status transition (pharmacy/admin only)
@router.put("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    payload: OrderStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_only)
):
    order = OrderLedger(db).update_status(
        current_user, order_id, payload.status,
        ip=request.client.host if request.client else None,
    )
    return _order_to_out(order)
