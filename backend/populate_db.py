"""Seeds a development database with demo accounts and medicines."""
import logging
from decimal import Decimal

from database import SessionLocal, init_db
from models.medicine import Medicine
from models.users import User, ROLE_ADMIN, ROLE_CUSTOMER, ROLE_PHARMACY
from utils.tokenJWT import token_for_user

logger = logging.getLogger(__name__)

# name, category, price, stock
DEMO_MEDICINES = [
    ("Paracetamol 500mg", "Pain relief", "30.00", 120),
    ("Ibuprofen 400mg", "Pain relief", "45.50", 80),
    ("Cetirizine 10mg", "Allergy", "25.00", 60),
    ("Amoxicillin 250mg", "Antibiotic", "110.00", 15),
    ("ORS Sachet", "Hydration", "20.00", 200),
    ("Vitamin D3 1000IU", "Supplements", "240.00", 5),
]


def _get_or_create_user(session, email, name, role, verified=False):
    user = session.query(User).filter(User.email == email).first()
    if not user:
        user = User(email=email, name=name, role=role, verified=verified)
        session.add(user)
        session.flush()
    return user


def load_all_data():
    init_db()
    session = SessionLocal()
    try:
        admin = _get_or_create_user(session, "admin@pharmacy.local", "Admin", ROLE_ADMIN, True)
        pharmacy = _get_or_create_user(session, "store@pharmacy.local", "City Pharmacy", ROLE_PHARMACY, True)
        customer = _get_or_create_user(session, "customer@pharmacy.local", "Demo Customer", ROLE_CUSTOMER)

        for name, category, price, stock in DEMO_MEDICINES:
            exists = session.query(Medicine).filter(Medicine.name == name).first()
            if exists:
                continue
            session.add(Medicine(
                name=name, category=category, description=f"{name} ({category})",
                price=Decimal(price), stock_quantity=stock, pharmacy_id=pharmacy.id,
            ))
        session.commit()

        # Tokens for trying the API without the external auth service
        for user in (admin, pharmacy, customer):
            print(f"{user.role:9} {user.email:28} {token_for_user(user)}")
    finally:
        session.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    load_all_data()
