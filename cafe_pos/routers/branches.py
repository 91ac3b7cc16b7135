from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cafe_pos.auth import get_current_user
from cafe_pos.common import envelope, get_or_404
from cafe_pos.constants import Messages
from cafe_pos.db import get_db
from cafe_pos.models import Branch
from cafe_pos.serializers import branch_out

router = APIRouter(prefix="/api/branches", tags=["Branches"], dependencies=[Depends(get_current_user)])


class BranchCreate(BaseModel):
    model_config = {"json_schema_extra": {"example": {"name": "Main Street Cafe", "address": "123 Main Street"}}}
    name: str = Field(min_length=1)
    address: Optional[str] = None


class BranchUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = None


@router.post("", status_code=201)
def create_branch(payload: BranchCreate, db: Session = Depends(get_db)) -> dict:
    branch = Branch(name=payload.name, address=payload.address)
    db.add(branch)
    db.commit()
    db.refresh(branch)
    return envelope(branch_out(branch))


@router.get("")
def list_branches(db: Session = Depends(get_db)) -> dict:
    branches = db.query(Branch).order_by(Branch.created_at.desc()).all()
    return envelope([branch_out(branch) for branch in branches])


@router.get("/{branch_id}")
def get_branch(branch_id: str, db: Session = Depends(get_db)) -> dict:
    return envelope(branch_out(get_or_404(db, Branch, branch_id, Messages.BRANCH_NOT_FOUND)))


@router.put("/{branch_id}")
def update_branch(branch_id: str, payload: BranchUpdate, db: Session = Depends(get_db)) -> dict:
    branch = get_or_404(db, Branch, branch_id, Messages.BRANCH_NOT_FOUND)
    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes and not (changes["name"] or "").strip():
        raise HTTPException(status_code=400, detail="Branch name is required")
    for field, value in changes.items():
        setattr(branch, field, value)
    db.commit()
    db.refresh(branch)
    return envelope(branch_out(branch))


@router.delete("/{branch_id}", status_code=204)
def delete_branch(branch_id: str, db: Session = Depends(get_db)) -> Response:
    branch = get_or_404(db, Branch, branch_id, Messages.BRANCH_NOT_FOUND)
    db.delete(branch)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Branch is still referenced by terminals, products or orders")
    return Response(status_code=204)
