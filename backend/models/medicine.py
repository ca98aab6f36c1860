# backend/models/medicine.py
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base

# Model Medicine
# A product sold by a pharmacy. stock_quantity is the authoritative
# inventory count; the check constraint keeps it from ever going negative.
class Medicine(Base):
    __tablename__ = "medicines"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String)
    category = Column(String)

    price = Column(Numeric(10, 2), CheckConstraint("price >= 0"), nullable=False)
    stock_quantity = Column(Integer, CheckConstraint("stock_quantity >= 0"), nullable=False, default=0)

    # Optional URL of the product picture
    image = Column(String, nullable=True)

    pharmacy_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    pharmacy = relationship("User")
