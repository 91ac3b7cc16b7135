from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from cafe_pos.auth import get_current_user
from cafe_pos.common import envelope, get_or_404
from cafe_pos.constants import Messages, OrderStatus, OrderType, PaymentMethod, PaymentStatus, TableStatus
from cafe_pos.db import get_db
from cafe_pos.models import Order, Payment
from cafe_pos.realtime import PAYMENT_COMPLETED, TABLE_UPDATED, RealtimeHub, get_hub
from cafe_pos.routers.orders import build_receipt
from cafe_pos.serializers import payment_out, table_out

router = APIRouter(prefix="/api/payments", tags=["Payments"], dependencies=[Depends(get_current_user)])


class PaymentCreate(BaseModel):
    model_config = {
        "json_schema_extra": {"example": {"order_id": "<order id>", "amount": "7.00", "method": "CASH"}}
    }
    order_id: str
    amount: Decimal = Field(gt=0)
    method: PaymentMethod
    transaction_reference: Optional[str] = None


@router.post("", status_code=201)
def process_payment(
    payload: PaymentCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
) -> dict:
    order = get_or_404(db, Order, payload.order_id, Messages.ORDER_NOT_FOUND)
    if order.status == OrderStatus.COMPLETED.value:
        raise HTTPException(status_code=400, detail=Messages.ORDER_COMPLETED)

    payment = Payment(
        order_id=order.id,
        amount=payload.amount,
        method=payload.method.value,
        status=PaymentStatus.COMPLETED.value,
        transaction_reference=payload.transaction_reference,
    )
    db.add(payment)
    order.status = OrderStatus.COMPLETED.value
    freed_table = None
    if order.order_type == OrderType.DINE_IN.value and order.table is not None:
        order.table.status = TableStatus.FREE.value
        freed_table = order.table
    if order.customer is not None:
        order.customer.total_sales = (order.customer.total_sales or Decimal("0")) + payload.amount
    # Payment, order completion and table release land together or not at all.
    db.commit()
    db.refresh(payment)

    data = payment_out(payment)
    background_tasks.add_task(hub.broadcast, PAYMENT_COMPLETED, data)
    if freed_table is not None:
        db.refresh(freed_table)
        background_tasks.add_task(hub.broadcast, TABLE_UPDATED, table_out(freed_table))
    return envelope(data)


@router.get("")
def list_payments(
    method: Optional[PaymentMethod] = Query(default=None),
    status: Optional[PaymentStatus] = Query(default=None),
    order_id: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> dict:
    query = db.query(Payment)
    if method is not None:
        query = query.filter(Payment.method == method.value)
    if status is not None:
        query = query.filter(Payment.status == status.value)
    if order_id is not None:
        query = query.filter(Payment.order_id == order_id)
    payments = query.order_by(Payment.created_at.desc()).all()
    return envelope([payment_out(payment) for payment in payments])


@router.post("/orders/{order_id}/receipt")
def generate_receipt(order_id: str, db: Session = Depends(get_db)) -> dict:
    order = get_or_404(db, Order, order_id, Messages.ORDER_NOT_FOUND)
    return envelope(build_receipt(db, order))
