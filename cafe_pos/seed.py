"""Bootstrap a fresh database with one branch, operator and terminal.

Run with ``python -m cafe_pos.seed``; prints the terminal id to configure
on the POS device.
"""

import logging
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cafe_pos.auth import get_password_hash
from cafe_pos.config import settings
from cafe_pos.constants import TableStatus
from cafe_pos.db import Base, SessionLocal, engine
from cafe_pos.logging import setup_json_logging
from cafe_pos.models import Branch, Category, DiningTable, Floor, PaymentSettings, PosTerminal, Product, User

logger = logging.getLogger(__name__)

SEED_EMAIL = "admin@cafe-pos.local"
SEED_PASSWORD = "password123"

MENU = {
    "Coffee": [("Espresso", "2.50"), ("Cappuccino", "3.50"), ("Latte", "3.80")],
    "Bakery": [("Croissant", "2.20"), ("Blueberry Muffin", "2.60")],
}


def seed(db: Session) -> PosTerminal:
    branch = Branch(name="Main Street Cafe", address="123 Main Street")
    user = User(name="Admin User", email=SEED_EMAIL, password=get_password_hash(SEED_PASSWORD))
    db.add_all([branch, user])
    db.flush()

    terminal = PosTerminal(terminal_name="Counter 1", branch_id=branch.id, user_id=user.id)
    db.add(terminal)
    db.flush()
    db.add(PaymentSettings(terminal_id=terminal.id, use_cash=True, use_digital=True, use_upi=False, upi_id=""))

    floor = Floor(branch_id=branch.id, name="Ground Floor")
    floor.tables = [
        DiningTable(table_number=str(number), seats=4 if number % 2 else 2, status=TableStatus.FREE.value)
        for number in range(1, 7)
    ]
    db.add(floor)

    for category_name, products in MENU.items():
        category = Category(branch_id=branch.id, name=category_name)
        db.add(category)
        db.flush()
        for name, price in products:
            db.add(Product(branch_id=branch.id, category_id=category.id, name=name, price=Decimal(price)))

    db.commit()
    return terminal


def main() -> None:
    setup_json_logging(settings.log_level)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        terminal_id = seed(db).id
    except SQLAlchemyError:
        db.rollback()
        logger.exception("seeding failed")
        raise
    finally:
        db.close()
    logger.info("seed complete; login with %s / %s", SEED_EMAIL, SEED_PASSWORD)
    print(f"TERMINAL_ID={terminal_id}")


if __name__ == "__main__":
    main()
