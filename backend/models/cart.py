# backend/models/cart.py
from sqlalchemy import Column, Integer, ForeignKey, DateTime, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Represents the customer's shopping cart, one per customer
class Cart(Base):
    __tablename__ = "carts" # Table name

    id = Column(Integer, primary_key=True, index=True) # Primary key
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, index=True, nullable=False) # Owner
    created_at = Column(DateTime, server_default=func.now()) # Creation timestamp

    # One-to-many relationship with cart items
    items = relationship("CartItem", back_populates="cart", cascade="all, delete-orphan", order_by="CartItem.id")


# Represents a single line (medicine + quantity) within a cart
class CartItem(Base):
    __tablename__ = "cart_items" # Table name

    id = Column(Integer, primary_key=True, index=True)
    cart_id = Column(Integer, ForeignKey("carts.id"), index=True, nullable=False) # Foreign key to parent cart
    medicine_id = Column(Integer, ForeignKey("medicines.id"), index=True, nullable=False) # Weak reference, lookup only
    quantity = Column(Integer, CheckConstraint("quantity >= 1"), nullable=False, default=1)

    cart = relationship("Cart", back_populates="items") # Relationship back to Cart
    medicine = relationship("Medicine") # Relationship to Medicine

    __table_args__ = (
        # Re-adding a medicine increments the existing line instead of duplicating it
        UniqueConstraint("cart_id", "medicine_id", name="uq_cartitem_cart_medicine"),
    )
