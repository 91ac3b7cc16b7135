from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cafe_pos.constants import OrderStatus, PaymentStatus, TableStatus
from cafe_pos.db import Base

ID_TYPE = String(36)
MONEY_TYPE = Numeric(12, 2)


def new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Branch(Base):
    __tablename__ = "branch"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    floors: Mapped[list["Floor"]] = relationship(back_populates="branch", cascade="all, delete-orphan")


class User(Base):
    __tablename__ = "app_user"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    password: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class PosTerminal(Base):
    __tablename__ = "pos_terminal"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    terminal_name: Mapped[str] = mapped_column(Text, nullable=False)
    branch_id: Mapped[Optional[str]] = mapped_column(ID_TYPE, ForeignKey("branch.id"))
    user_id: Mapped[Optional[str]] = mapped_column(ID_TYPE, ForeignKey("app_user.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    branch: Mapped[Optional[Branch]] = relationship()
    user: Mapped[Optional[User]] = relationship()
    sessions: Mapped[list["PosSession"]] = relationship(
        back_populates="terminal", order_by="PosSession.opened_at.desc()"
    )


class PosSession(Base):
    __tablename__ = "pos_session"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    terminal_id: Mapped[str] = mapped_column(ID_TYPE, ForeignKey("pos_terminal.id"), nullable=False, index=True)
    opened_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    total_sales: Mapped[Decimal] = mapped_column(MONEY_TYPE, nullable=False, default=Decimal("0"))

    terminal: Mapped[PosTerminal] = relationship(back_populates="sessions")
    orders: Mapped[list["Order"]] = relationship(back_populates="session", order_by="Order.created_at")


class Floor(Base):
    __tablename__ = "floor"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    branch_id: Mapped[str] = mapped_column(ID_TYPE, ForeignKey("branch.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)

    branch: Mapped[Branch] = relationship(back_populates="floors")
    tables: Mapped[list["DiningTable"]] = relationship(
        back_populates="floor", cascade="all, delete-orphan", order_by="DiningTable.table_number"
    )


class DiningTable(Base):
    __tablename__ = "dining_table"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    floor_id: Mapped[str] = mapped_column(ID_TYPE, ForeignKey("floor.id"), nullable=False, index=True)
    table_number: Mapped[str] = mapped_column(String(32), nullable=False)
    seats: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=TableStatus.FREE.value)

    floor: Mapped[Floor] = relationship(back_populates="tables")


class Category(Base):
    __tablename__ = "category"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    branch_id: Mapped[str] = mapped_column(ID_TYPE, ForeignKey("branch.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)

    branch: Mapped[Branch] = relationship()


class Product(Base):
    __tablename__ = "product"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    branch_id: Mapped[str] = mapped_column(ID_TYPE, ForeignKey("branch.id"), nullable=False, index=True)
    category_id: Mapped[str] = mapped_column(ID_TYPE, ForeignKey("category.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(MONEY_TYPE, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    category: Mapped[Category] = relationship()


class Customer(Base):
    __tablename__ = "customer"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), unique=True)
    address: Mapped[Optional[str]] = mapped_column(Text)
    total_sales: Mapped[Decimal] = mapped_column(MONEY_TYPE, nullable=False, default=Decimal("0"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class Order(Base):
    __tablename__ = "pos_order"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    branch_id: Mapped[Optional[str]] = mapped_column(ID_TYPE, ForeignKey("branch.id"), index=True)
    session_id: Mapped[str] = mapped_column(ID_TYPE, ForeignKey("pos_session.id"), nullable=False, index=True)
    table_id: Mapped[Optional[str]] = mapped_column(ID_TYPE, ForeignKey("dining_table.id"), index=True)
    customer_id: Mapped[Optional[str]] = mapped_column(ID_TYPE, ForeignKey("customer.id"))
    order_type: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=OrderStatus.CREATED.value)
    total_amount: Mapped[Decimal] = mapped_column(MONEY_TYPE, nullable=False, default=Decimal("0"))
    created_by: Mapped[Optional[str]] = mapped_column(ID_TYPE, ForeignKey("app_user.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    session: Mapped[PosSession] = relationship(back_populates="orders")
    table: Mapped[Optional[DiningTable]] = relationship()
    customer: Mapped[Optional[Customer]] = relationship()
    items: Mapped[list["OrderItem"]] = relationship(back_populates="order", cascade="all, delete-orphan")
    payments: Mapped[list["Payment"]] = relationship(back_populates="order")


class OrderItem(Base):
    __tablename__ = "order_item"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    order_id: Mapped[str] = mapped_column(ID_TYPE, ForeignKey("pos_order.id"), nullable=False, index=True)
    product_id: Mapped[str] = mapped_column(ID_TYPE, ForeignKey("product.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price_at_time: Mapped[Decimal] = mapped_column(MONEY_TYPE, nullable=False)

    order: Mapped[Order] = relationship(back_populates="items")
    product: Mapped[Product] = relationship()


class Payment(Base):
    __tablename__ = "payment"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    order_id: Mapped[str] = mapped_column(ID_TYPE, ForeignKey("pos_order.id"), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(MONEY_TYPE, nullable=False)
    method: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=PaymentStatus.PENDING.value)
    transaction_reference: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    order: Mapped[Order] = relationship(back_populates="payments")


class Receipt(Base):
    __tablename__ = "receipt"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    order_id: Mapped[str] = mapped_column(ID_TYPE, ForeignKey("pos_order.id"), nullable=False, index=True)
    receipt_number: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class PaymentSettings(Base):
    __tablename__ = "payment_settings"
    __table_args__ = (UniqueConstraint("terminal_id"),)

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    terminal_id: Mapped[str] = mapped_column(ID_TYPE, ForeignKey("pos_terminal.id"), nullable=False)
    use_cash: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    use_digital: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    use_upi: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    upi_id: Mapped[Optional[str]] = mapped_column(Text, default="")
    upi_name: Mapped[Optional[str]] = mapped_column(Text)
    merchant_code: Mapped[Optional[str]] = mapped_column(Text)
