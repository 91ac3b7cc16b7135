from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cafe_pos.auth import get_current_user
from cafe_pos.common import envelope, get_or_404
from cafe_pos.constants import Messages
from cafe_pos.db import get_db
from cafe_pos.models import Category, Product
from cafe_pos.serializers import product_out

router = APIRouter(prefix="/api/products", tags=["Products"], dependencies=[Depends(get_current_user)])


class ProductCreate(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {"category_id": "<category id>", "name": "Cappuccino", "price": "3.50"}
        }
    }
    category_id: str
    name: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    branch_id: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    price: Optional[Decimal] = Field(default=None, ge=0)
    category_id: Optional[str] = None
    is_active: Optional[bool] = None


@router.post("", status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)) -> dict:
    category = get_or_404(db, Category, payload.category_id, Messages.CATEGORY_NOT_FOUND)
    if payload.branch_id is not None and payload.branch_id != category.branch_id:
        raise HTTPException(status_code=400, detail="Category belongs to a different branch")
    product = Product(
        branch_id=category.branch_id,
        category_id=category.id,
        name=payload.name,
        price=payload.price,
        is_active=True,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return envelope(product_out(product))


@router.get("")
def list_products(
    branch_id: Optional[str] = Query(default=None),
    category_id: Optional[str] = Query(default=None),
    is_active: Optional[bool] = Query(default=None),
    db: Session = Depends(get_db),
) -> dict:
    query = db.query(Product)
    if branch_id is not None:
        query = query.filter(Product.branch_id == branch_id)
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if is_active is not None:
        query = query.filter(Product.is_active == is_active)
    return envelope([product_out(product) for product in query.order_by(Product.name).all()])


@router.get("/{product_id}")
def get_product(product_id: str, db: Session = Depends(get_db)) -> dict:
    return envelope(product_out(get_or_404(db, Product, product_id, Messages.PRODUCT_NOT_FOUND)))


@router.put("/{product_id}")
def update_product(product_id: str, payload: ProductUpdate, db: Session = Depends(get_db)) -> dict:
    product = get_or_404(db, Product, product_id, Messages.PRODUCT_NOT_FOUND)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "category_id" in changes:
        category = get_or_404(db, Category, changes["category_id"], Messages.CATEGORY_NOT_FOUND)
        if category.branch_id != product.branch_id:
            raise HTTPException(status_code=400, detail="Category belongs to a different branch")
    for field, value in changes.items():
        setattr(product, field, value)
    db.commit()
    db.refresh(product)
    return envelope(product_out(product))


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: str, db: Session = Depends(get_db)) -> Response:
    product = get_or_404(db, Product, product_id, Messages.PRODUCT_NOT_FOUND)
    db.delete(product)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Product is referenced by orders; deactivate it instead")
    return Response(status_code=204)
