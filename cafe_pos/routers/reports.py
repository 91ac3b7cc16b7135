"""Sales reporting over completed orders.

Day boundaries are UTC midnights; a report "for a date" covers
``[date 00:00, date + 1 day)``.
"""

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from cafe_pos.auth import get_current_user
from cafe_pos.common import as_utc, envelope, money, now
from cafe_pos.constants import OrderStatus
from cafe_pos.db import get_db
from cafe_pos.models import Order, OrderItem, Product

router = APIRouter(prefix="/api/reports", tags=["Reports"], dependencies=[Depends(get_current_user)])


def day_bounds(target: date) -> tuple[datetime, datetime]:
    starts_at = datetime.combine(target, time.min, tzinfo=timezone.utc)
    return starts_at, starts_at + timedelta(days=1)


def completed_orders(db: Session, branch_id: Optional[str], starts_at: datetime, ends_at: datetime) -> list[Order]:
    query = db.query(Order).filter(
        Order.status == OrderStatus.COMPLETED.value,
        Order.created_at >= starts_at,
        Order.created_at < ends_at,
    )
    if branch_id is not None:
        query = query.filter(Order.branch_id == branch_id)
    return query.all()


@router.get("/daily-sales")
def daily_sales(
    target_date: Optional[date] = Query(default=None, alias="date"),
    branch_id: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> dict:
    target = target_date or now().date()
    orders = completed_orders(db, branch_id, *day_bounds(target))
    total = sum((order.total_amount for order in orders), Decimal("0"))
    return envelope({"date": target.isoformat(), "total_sales": money(total), "order_count": len(orders)})


@router.get("/sales-range")
def sales_by_range(
    start_date: date = Query(...),
    end_date: date = Query(...),
    branch_id: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> dict:
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")
    starts_at, _ = day_bounds(start_date)
    _, ends_at = day_bounds(end_date)
    orders = completed_orders(db, branch_id, starts_at, ends_at)

    total = Decimal("0")
    breakdown: dict[str, dict] = {}
    for order in orders:
        amount = order.total_amount or Decimal("0")
        total += amount
        key = as_utc(order.created_at).date().isoformat()
        bucket = breakdown.setdefault(key, {"date": key, "sales": Decimal("0"), "orders": 0})
        bucket["sales"] += amount
        bucket["orders"] += 1

    return envelope(
        {
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
            "total_sales": money(total),
            "order_count": len(orders),
            "daily_breakdown": [
                {**bucket, "sales": money(bucket["sales"])}
                for _, bucket in sorted(breakdown.items())
            ],
        }
    )


@router.get("/top-products")
def top_products(
    limit: int = Query(default=10, ge=1, le=100),
    branch_id: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> dict:
    quantity = func.sum(OrderItem.quantity).label("total_quantity")
    query = (
        db.query(Product.id, Product.name, Product.price, quantity)
        .join(OrderItem, OrderItem.product_id == Product.id)
        .join(Order, Order.id == OrderItem.order_id)
    )
    if branch_id is not None:
        query = query.filter(Order.branch_id == branch_id)
    rows = query.group_by(Product.id, Product.name, Product.price).order_by(quantity.desc()).limit(limit).all()
    return envelope(
        [
            {
                "product": {"id": row.id, "name": row.name, "price": money(row.price)},
                "total_quantity": int(row.total_quantity or 0),
            }
            for row in rows
        ]
    )


@router.get("/orders-by-status")
def orders_by_status(branch_id: Optional[str] = Query(default=None), db: Session = Depends(get_db)) -> dict:
    query = db.query(Order.status, func.count(Order.id))
    if branch_id is not None:
        query = query.filter(Order.branch_id == branch_id)
    rows = query.group_by(Order.status).all()
    return envelope([{"status": status, "count": count} for status, count in rows])


@router.get("/hourly-sales")
def hourly_sales(
    target_date: Optional[date] = Query(default=None, alias="date"),
    branch_id: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> dict:
    target = target_date or now().date()
    buckets = [{"hour": hour, "sales": Decimal("0"), "orders": 0} for hour in range(24)]
    for order in completed_orders(db, branch_id, *day_bounds(target)):
        bucket = buckets[as_utc(order.created_at).hour]
        bucket["sales"] += order.total_amount or Decimal("0")
        bucket["orders"] += 1
    return envelope([{**bucket, "sales": money(bucket["sales"])} for bucket in buckets])
