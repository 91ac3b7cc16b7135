from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field
from sqlalchemy import func
from sqlalchemy.orm import Session

from cafe_pos.auth import get_current_user
from cafe_pos.common import envelope, get_or_404
from cafe_pos.constants import Messages
from cafe_pos.db import get_db
from cafe_pos.models import Branch, Category, Product
from cafe_pos.serializers import category_out

router = APIRouter(prefix="/api/categories", tags=["Categories"], dependencies=[Depends(get_current_user)])


class CategoryCreate(BaseModel):
    model_config = {"json_schema_extra": {"example": {"branch_id": "<branch id>", "name": "Coffee"}}}
    branch_id: str
    name: str = Field(min_length=1)


class CategoryUpdate(BaseModel):
    name: str = Field(min_length=1)


def _name_taken(db: Session, branch_id: str, name: str, exclude_id: Optional[str] = None) -> bool:
    query = db.query(Category).filter(
        Category.branch_id == branch_id,
        func.lower(Category.name) == name.strip().lower(),
    )
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    return query.first() is not None


@router.post("", status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)) -> dict:
    get_or_404(db, Branch, payload.branch_id, Messages.BRANCH_NOT_FOUND)
    if _name_taken(db, payload.branch_id, payload.name):
        raise HTTPException(status_code=409, detail=Messages.CATEGORY_EXISTS)
    category = Category(branch_id=payload.branch_id, name=payload.name.strip())
    db.add(category)
    db.commit()
    db.refresh(category)
    return envelope(category_out(category))


@router.get("")
def list_categories(branch_id: Optional[str] = Query(default=None), db: Session = Depends(get_db)) -> dict:
    query = db.query(Category)
    if branch_id is not None:
        query = query.filter(Category.branch_id == branch_id)
    return envelope([category_out(category) for category in query.order_by(Category.name).all()])


@router.get("/{category_id}")
def get_category(category_id: str, db: Session = Depends(get_db)) -> dict:
    return envelope(category_out(get_or_404(db, Category, category_id, Messages.CATEGORY_NOT_FOUND)))


@router.put("/{category_id}")
def update_category(category_id: str, payload: CategoryUpdate, db: Session = Depends(get_db)) -> dict:
    category = get_or_404(db, Category, category_id, Messages.CATEGORY_NOT_FOUND)
    if _name_taken(db, category.branch_id, payload.name, exclude_id=category.id):
        raise HTTPException(status_code=409, detail=Messages.CATEGORY_EXISTS)
    category.name = payload.name.strip()
    db.commit()
    db.refresh(category)
    return envelope(category_out(category))


@router.delete("/{category_id}", status_code=204)
def delete_category(category_id: str, db: Session = Depends(get_db)) -> Response:
    category = get_or_404(db, Category, category_id, Messages.CATEGORY_NOT_FOUND)
    product_count = db.query(Product).filter(Product.category_id == category_id).count()
    if product_count:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Cannot delete category. {product_count} product(s) are assigned to this category. "
                "Please reassign or delete them first."
            ),
        )
    db.delete(category)
    db.commit()
    return Response(status_code=204)
