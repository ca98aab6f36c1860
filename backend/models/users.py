# backend/models/users.py
from sqlalchemy import Column, Integer, String, Boolean
from database import Base

# Account roles recognised by the store
ROLE_CUSTOMER = "customer"
ROLE_PHARMACY = "pharmacy"
ROLE_ADMIN = "admin"

# Represents an account: a customer, a pharmacy or an administrator
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default=ROLE_CUSTOMER)
    # Pharmacies act on stock and orders only after admin approval
    verified = Column(Boolean, nullable=False, default=False)
