# backend/models/stock.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from database import Base

MOVEMENT_OUT = "OUT"
MOVEMENT_IN = "IN"
MOVEMENT_ADJUSTMENT = "ADJUSTMENT"

class StockMovement(Base):
    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True, index=True)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Signed quantity: negative for checkout decrements
    qty = Column(Integer, nullable=False)

    reason = Column(String, nullable=True)
    # Movement classification (OUT, IN, ADJUSTMENT)
    type = Column(String, nullable=False)

    # Order that caused an OUT movement
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    medicine = relationship("Medicine")
    user = relationship("User")
