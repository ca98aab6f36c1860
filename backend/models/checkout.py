# backend/models/checkout.py
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime, JSON, func
from database import Base

INTENT_CREATED = "created"
INTENT_COMPLETED = "completed"
INTENT_FAILED = "failed"

# Staging record between payment order creation and the verified callback.
# Holds the gateway order id and the delivery address chosen at checkout;
# it is never an Order.
class CheckoutIntent(Base):
    __tablename__ = "checkout_intents"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    gateway_order_id = Column(String, unique=True, index=True, nullable=False)

    amount = Column(Numeric(10, 2), nullable=False)
    amount_minor = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False)

    delivery_address = Column(JSON, nullable=False)
    # [[medicine_id, quantity], ...] sorted by medicine id, as the cart stood when payment was opened
    lines = Column(JSON, nullable=False)

    status = Column(String, nullable=False, default=INTENT_CREATED, index=True)
    failure_reason = Column(String, nullable=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
