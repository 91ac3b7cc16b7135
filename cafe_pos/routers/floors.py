from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cafe_pos.auth import get_current_user
from cafe_pos.common import envelope, get_or_404
from cafe_pos.constants import Messages
from cafe_pos.db import get_db
from cafe_pos.models import Branch, Floor
from cafe_pos.serializers import floor_out

router = APIRouter(prefix="/api/floors", tags=["Floors"], dependencies=[Depends(get_current_user)])


class FloorCreate(BaseModel):
    model_config = {"json_schema_extra": {"example": {"branch_id": "<branch id>", "name": "Ground Floor"}}}
    branch_id: str
    name: str = Field(min_length=1)


class FloorUpdate(BaseModel):
    name: str = Field(min_length=1)


@router.post("", status_code=201)
def create_floor(payload: FloorCreate, db: Session = Depends(get_db)) -> dict:
    get_or_404(db, Branch, payload.branch_id, Messages.BRANCH_NOT_FOUND)
    floor = Floor(branch_id=payload.branch_id, name=payload.name)
    db.add(floor)
    db.commit()
    db.refresh(floor)
    return envelope(floor_out(floor))


@router.get("")
def list_floors(branch_id: Optional[str] = Query(default=None), db: Session = Depends(get_db)) -> dict:
    query = db.query(Floor)
    if branch_id is not None:
        query = query.filter(Floor.branch_id == branch_id)
    floors = query.order_by(Floor.name).all()
    return envelope([{**floor_out(floor), "table_count": len(floor.tables)} for floor in floors])


@router.get("/{branch_id}/layout")
def get_floor_layout(branch_id: str, db: Session = Depends(get_db)) -> dict:
    floors = db.query(Floor).filter(Floor.branch_id == branch_id).order_by(Floor.name).all()
    return envelope([floor_out(floor, with_tables=True) for floor in floors])


@router.get("/{floor_id}")
def get_floor(floor_id: str, db: Session = Depends(get_db)) -> dict:
    floor = get_or_404(db, Floor, floor_id, Messages.FLOOR_NOT_FOUND)
    return envelope(floor_out(floor, with_tables=True))


@router.put("/{floor_id}")
def update_floor(floor_id: str, payload: FloorUpdate, db: Session = Depends(get_db)) -> dict:
    floor = get_or_404(db, Floor, floor_id, Messages.FLOOR_NOT_FOUND)
    floor.name = payload.name
    db.commit()
    db.refresh(floor)
    return envelope(floor_out(floor))


@router.delete("/{floor_id}", status_code=204)
def delete_floor(floor_id: str, db: Session = Depends(get_db)) -> Response:
    floor = get_or_404(db, Floor, floor_id, Messages.FLOOR_NOT_FOUND)
    db.delete(floor)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Floor has tables referenced by orders")
    return Response(status_code=204)
