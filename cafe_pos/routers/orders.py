import time
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from cafe_pos.auth import get_current_user
from cafe_pos.common import envelope, get_or_404, iso, money, now
from cafe_pos.constants import Messages, OrderStatus, OrderType, TableStatus
from cafe_pos.db import get_db
from cafe_pos.models import Customer, DiningTable, Order, OrderItem, PosSession, Product, Receipt, User
from cafe_pos.realtime import ORDER_CREATED, ORDER_SENT, ORDER_UPDATED, TABLE_UPDATED, RealtimeHub, get_hub
from cafe_pos.serializers import order_out, payment_out, table_out

router = APIRouter(prefix="/api/orders", tags=["Orders"], dependencies=[Depends(get_current_user)])


class OrderItemIn(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)


class OrderCreate(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "session_id": "<session id>",
                "order_type": "DINE_IN",
                "table_id": "<table id>",
                "items": [{"product_id": "<product id>", "quantity": 2}],
            }
        }
    }
    session_id: str
    order_type: OrderType = OrderType.DINE_IN
    table_id: Optional[str] = None
    branch_id: Optional[str] = None
    customer_id: Optional[str] = None
    items: list[OrderItemIn] = Field(default_factory=list)


class OrderItemsAdd(BaseModel):
    items: list[OrderItemIn] = Field(default_factory=list)


def price_items(db: Session, items: list[OrderItemIn]) -> tuple[list[OrderItem], Decimal]:
    """Build order lines at the current product prices."""
    products = {
        product.id: product
        for product in db.query(Product).filter(Product.id.in_({item.product_id for item in items})).all()
    }
    lines: list[OrderItem] = []
    total = Decimal("0")
    for item in items:
        product = products.get(item.product_id)
        if product is None:
            raise HTTPException(status_code=404, detail=f"{Messages.PRODUCT_NOT_FOUND}: {item.product_id}")
        if not product.is_active:
            raise HTTPException(status_code=400, detail=f"Product is not available: {product.name}")
        lines.append(OrderItem(product_id=product.id, quantity=item.quantity, price_at_time=product.price))
        total += product.price * item.quantity
    return lines, total


def build_receipt(db: Session, order: Order) -> dict:
    receipt_number = f"RCPT-{int(time.time() * 1000)}-{uuid4().hex[:6].upper()}"
    db.add(Receipt(order_id=order.id, receipt_number=receipt_number))
    db.commit()
    return {
        "receipt_number": receipt_number,
        "date": iso(now()),
        "order_id": order.id,
        "branch_id": order.branch_id,
        "items": [
            {
                "name": item.product.name,
                "qty": item.quantity,
                "price": money(item.price_at_time),
                "total": money(item.price_at_time * item.quantity),
            }
            for item in order.items
        ],
        "total_amount": money(order.total_amount),
        "payments": [payment_out(payment) for payment in order.payments],
        "table": order.table.table_number if order.table else "Takeaway",
    }


@router.post("", status_code=201)
def create_order(
    payload: OrderCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    hub: RealtimeHub = Depends(get_hub),
) -> dict:
    session = get_or_404(db, PosSession, payload.session_id, Messages.SESSION_NOT_FOUND)
    if session.closed_at is not None:
        raise HTTPException(status_code=400, detail=Messages.SESSION_ALREADY_CLOSED)
    if payload.customer_id is not None:
        get_or_404(db, Customer, payload.customer_id, Messages.CUSTOMER_NOT_FOUND)

    table = None
    if payload.order_type == OrderType.DINE_IN:
        if not payload.table_id:
            raise HTTPException(status_code=400, detail=Messages.TABLE_ID_REQUIRED)
        table = get_or_404(db, DiningTable, payload.table_id, Messages.TABLE_NOT_FOUND)
        if table.status != TableStatus.FREE.value:
            raise HTTPException(status_code=409, detail=Messages.TABLE_OCCUPIED)

    lines, total = price_items(db, payload.items) if payload.items else ([], Decimal("0"))
    branch_id = payload.branch_id or session.terminal.branch_id
    if branch_id is None and table is not None:
        branch_id = table.floor.branch_id

    order = Order(
        branch_id=branch_id,
        session_id=session.id,
        table_id=table.id if table is not None else None,
        customer_id=payload.customer_id,
        order_type=payload.order_type.value,
        status=OrderStatus.CREATED.value,
        total_amount=total,
        created_by=user.id,
        items=lines,
    )
    db.add(order)
    if table is not None:
        table.status = TableStatus.OCCUPIED.value
    db.commit()
    db.refresh(order)

    data = order_out(order)
    background_tasks.add_task(hub.broadcast, ORDER_CREATED, data)
    if table is not None:
        db.refresh(table)
        background_tasks.add_task(hub.broadcast, TABLE_UPDATED, table_out(table))
    return envelope(data)


@router.get("")
def list_orders(
    status: Optional[OrderStatus] = Query(default=None),
    session_id: Optional[str] = Query(default=None),
    branch_id: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> dict:
    query = db.query(Order)
    if status is not None:
        query = query.filter(Order.status == status.value)
    if session_id is not None:
        query = query.filter(Order.session_id == session_id)
    if branch_id is not None:
        query = query.filter(Order.branch_id == branch_id)
    orders = query.order_by(Order.created_at.desc()).all()
    return envelope([order_out(order) for order in orders])


@router.get("/table/{table_id}/active")
def get_active_order_for_table(table_id: str, db: Session = Depends(get_db)) -> dict:
    order = (
        db.query(Order)
        .filter(
            Order.table_id == table_id,
            Order.order_type == OrderType.DINE_IN.value,
            Order.status != OrderStatus.COMPLETED.value,
        )
        .order_by(Order.created_at.desc())
        .first()
    )
    return envelope(order_out(order) if order else None)


@router.get("/{order_id}")
def get_order(order_id: str, db: Session = Depends(get_db)) -> dict:
    return envelope(order_out(get_or_404(db, Order, order_id, Messages.ORDER_NOT_FOUND)))


@router.post("/{order_id}/items")
def add_order_items(
    order_id: str,
    payload: OrderItemsAdd,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
) -> dict:
    if not payload.items:
        raise HTTPException(status_code=400, detail=Messages.ITEMS_REQUIRED)
    order = get_or_404(db, Order, order_id, Messages.ORDER_NOT_FOUND)
    if order.status == OrderStatus.COMPLETED.value:
        raise HTTPException(status_code=400, detail=Messages.ORDER_COMPLETED)
    lines, increment = price_items(db, payload.items)
    order.items.extend(lines)
    order.total_amount = (order.total_amount or Decimal("0")) + increment
    db.commit()
    db.refresh(order)
    data = order_out(order)
    background_tasks.add_task(hub.broadcast, ORDER_UPDATED, data)
    return envelope(data)


@router.post("/{order_id}/send")
def send_to_kitchen(
    order_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
) -> dict:
    order = get_or_404(db, Order, order_id, Messages.ORDER_NOT_FOUND)
    if not order.items:
        raise HTTPException(status_code=400, detail=Messages.ORDER_EMPTY)
    background_tasks.add_task(hub.broadcast, ORDER_SENT, order_out(order))
    return envelope({"message": "Order sent to kitchen successfully", "order_id": order.id})


@router.post("/{order_id}/receipt")
def generate_receipt(order_id: str, db: Session = Depends(get_db)) -> dict:
    order = get_or_404(db, Order, order_id, Messages.ORDER_NOT_FOUND)
    return envelope(build_receipt(db, order))
