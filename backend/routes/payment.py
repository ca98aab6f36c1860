# backend/routes/payment.py
import logging
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from models.users import User, ROLE_CUSTOMER
from routes.orders import _order_to_out
from schemas.payment import CheckoutRequest, CheckoutStarted, PaymentVerifyRequest
from services.checkout import CheckoutOrchestrator
from utils.razorpay_client import get_payment_gateway
from utils.tokenJWT import role_required

router = APIRouter(prefix="/api/payment", tags=["Payment"])
logger = logging.getLogger(__name__)

customer_only = role_required(ROLE_CUSTOMER)

@router.post("/create-order", response_model=CheckoutStarted)
async def create_payment_order(
    payload: CheckoutRequest,
    request: Request,
    db: Session = Depends(get_db),
    gateway = Depends(get_payment_gateway),
    current_user: User = Depends(customer_only)
):
    orchestrator = CheckoutOrchestrator(db, gateway)
    return await orchestrator.begin_checkout(
        current_user, payload.delivery_address,
        ip=request.client.host if request.client else None,
    )

# Runs in the threadpool: the commit waits on database row locks
@router.post("/verify")
def verify_payment(
    payload: PaymentVerifyRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(customer_only)
):
    orchestrator = CheckoutOrchestrator(db)
    order, created = orchestrator.verify_payment(
        current_user,
        payload.gateway_order_id,
        payload.gateway_payment_id,
        payload.signature,
        ip=request.client.host if request.client else None,
    )
    return {
        "success": True,
        "message": "Order placed successfully" if created else "Payment already processed",
        "order": _order_to_out(order),
    }
