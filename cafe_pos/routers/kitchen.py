from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from cafe_pos.auth import get_current_user
from cafe_pos.common import envelope, get_or_404
from cafe_pos.constants import ORDER_TRANSITIONS, Messages, OrderStatus
from cafe_pos.db import get_db
from cafe_pos.models import Order
from cafe_pos.realtime import ORDER_UPDATED, RealtimeHub, get_hub
from cafe_pos.serializers import order_out

router = APIRouter(prefix="/api/kitchen", tags=["Kitchen"], dependencies=[Depends(get_current_user)])

ACTIVE_STATUSES = (OrderStatus.CREATED.value, OrderStatus.IN_PROGRESS.value)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


def _orders_with_status(db: Session, statuses, branch_id: Optional[str]) -> list[Order]:
    query = db.query(Order).filter(Order.status.in_(statuses))
    if branch_id is not None:
        query = query.filter(Order.branch_id == branch_id)
    return query.order_by(Order.created_at).all()


def transition_order(db: Session, order_id: str, new_status: OrderStatus) -> Order:
    order = get_or_404(db, Order, order_id, Messages.ORDER_NOT_FOUND)
    current = OrderStatus(order.status)
    if new_status not in ORDER_TRANSITIONS[current]:
        raise HTTPException(
            status_code=400,
            detail=f"{Messages.INVALID_STATUS_TRANSITION}: {current.value} -> {new_status.value}",
        )
    order.status = new_status.value
    db.commit()
    db.refresh(order)
    return order


def _respond(order: Order, background_tasks: BackgroundTasks, hub: RealtimeHub) -> dict:
    data = order_out(order)
    background_tasks.add_task(hub.broadcast, ORDER_UPDATED, data)
    return envelope(data)


@router.get("/orders")
def list_active_orders(branch_id: Optional[str] = Query(default=None), db: Session = Depends(get_db)) -> dict:
    return envelope([order_out(order) for order in _orders_with_status(db, ACTIVE_STATUSES, branch_id)])


@router.get("/ready")
def list_ready_orders(branch_id: Optional[str] = Query(default=None), db: Session = Depends(get_db)) -> dict:
    orders = _orders_with_status(db, (OrderStatus.READY.value,), branch_id)
    return envelope([order_out(order) for order in orders])


@router.patch("/orders/{order_id}/status")
def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
) -> dict:
    return _respond(transition_order(db, order_id, payload.status), background_tasks, hub)


@router.post("/orders/{order_id}/start")
def start_order(
    order_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
) -> dict:
    return _respond(transition_order(db, order_id, OrderStatus.IN_PROGRESS), background_tasks, hub)


@router.post("/orders/{order_id}/ready")
def mark_order_ready(
    order_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
) -> dict:
    return _respond(transition_order(db, order_id, OrderStatus.READY), background_tasks, hub)
