from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cafe_pos.auth import get_current_user
from cafe_pos.common import envelope, get_or_404
from cafe_pos.constants import Messages
from cafe_pos.db import get_db
from cafe_pos.models import Customer
from cafe_pos.serializers import customer_out

router = APIRouter(prefix="/api/customers", tags=["Customers"], dependencies=[Depends(get_current_user)])


class CustomerCreate(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {"name": "John Doe", "phone": "9876543210", "email": "john@example.com"}
        }
    }
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


def _commit_unique(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail=Messages.CUSTOMER_EXISTS)


@router.post("", status_code=201)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)) -> dict:
    if not payload.name or not payload.name.strip():
        raise HTTPException(status_code=400, detail="Customer name is required")
    customer = Customer(
        name=payload.name.strip(),
        email=payload.email or None,
        phone=payload.phone or None,
        address=payload.address,
    )
    db.add(customer)
    _commit_unique(db)
    db.refresh(customer)
    return envelope(customer_out(customer))


@router.get("")
def list_customers(
    name: Optional[str] = Query(default=None),
    phone: Optional[str] = Query(default=None),
    email: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> dict:
    query = db.query(Customer)
    if name:
        query = query.filter(Customer.name.ilike(f"%{name}%"))
    if phone:
        query = query.filter(Customer.phone.contains(phone))
    if email:
        query = query.filter(Customer.email.ilike(f"%{email}%"))
    customers = query.order_by(Customer.created_at.desc()).all()
    return envelope([customer_out(customer) for customer in customers])


@router.get("/{customer_id}")
def get_customer(customer_id: str, db: Session = Depends(get_db)) -> dict:
    return envelope(customer_out(get_or_404(db, Customer, customer_id, Messages.CUSTOMER_NOT_FOUND)))


@router.put("/{customer_id}")
def update_customer(customer_id: str, payload: CustomerUpdate, db: Session = Depends(get_db)) -> dict:
    customer = get_or_404(db, Customer, customer_id, Messages.CUSTOMER_NOT_FOUND)
    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes and not (changes["name"] or "").strip():
        raise HTTPException(status_code=400, detail="Customer name is required")
    for field, value in changes.items():
        setattr(customer, field, value)
    _commit_unique(db)
    db.refresh(customer)
    return envelope(customer_out(customer))


@router.delete("/{customer_id}", status_code=204)
def delete_customer(customer_id: str, db: Session = Depends(get_db)) -> Response:
    customer = get_or_404(db, Customer, customer_id, Messages.CUSTOMER_NOT_FOUND)
    db.delete(customer)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Customer has orders and cannot be deleted")
    return Response(status_code=204)
