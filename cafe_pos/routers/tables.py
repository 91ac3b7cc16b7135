from typing import Optional, Union

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cafe_pos.auth import get_current_user
from cafe_pos.common import envelope, get_or_404, table_sort_key
from cafe_pos.constants import Messages, TableStatus
from cafe_pos.db import get_db
from cafe_pos.models import DiningTable, Floor
from cafe_pos.realtime import TABLE_UPDATED, RealtimeHub, get_hub
from cafe_pos.serializers import table_out

router = APIRouter(prefix="/api/tables", tags=["Tables"], dependencies=[Depends(get_current_user)])


class TableCreate(BaseModel):
    model_config = {"json_schema_extra": {"example": {"floor_id": "<floor id>", "table_number": "5", "seats": 4}}}
    floor_id: str
    table_number: Union[int, str]
    seats: int = Field(default=4, ge=1)


class TableUpdate(BaseModel):
    table_number: Optional[Union[int, str]] = None
    seats: Optional[int] = Field(default=None, ge=1)
    status: Optional[TableStatus] = None


class TableStatusUpdate(BaseModel):
    status: TableStatus


@router.post("", status_code=201)
def create_table(payload: TableCreate, db: Session = Depends(get_db)) -> dict:
    table_number = str(payload.table_number).strip()
    if not table_number:
        raise HTTPException(status_code=400, detail="Table number is required")
    get_or_404(db, Floor, payload.floor_id, Messages.FLOOR_NOT_FOUND)
    table = DiningTable(
        floor_id=payload.floor_id,
        table_number=table_number,
        seats=payload.seats,
        status=TableStatus.FREE.value,
    )
    db.add(table)
    db.commit()
    db.refresh(table)
    return envelope(table_out(table))


@router.get("")
def list_tables(floor_id: Optional[str] = Query(default=None), db: Session = Depends(get_db)) -> dict:
    query = db.query(DiningTable)
    if floor_id is not None:
        query = query.filter(DiningTable.floor_id == floor_id)
    tables = sorted(query.all(), key=lambda table: table_sort_key(table.table_number))
    return envelope([table_out(table) for table in tables])


@router.get("/{table_id}")
def get_table(table_id: str, db: Session = Depends(get_db)) -> dict:
    return envelope(table_out(get_or_404(db, DiningTable, table_id, Messages.TABLE_NOT_FOUND)))


@router.put("/{table_id}")
def update_table(table_id: str, payload: TableUpdate, db: Session = Depends(get_db)) -> dict:
    table = get_or_404(db, DiningTable, table_id, Messages.TABLE_NOT_FOUND)
    if payload.table_number is not None:
        table_number = str(payload.table_number).strip()
        if not table_number:
            raise HTTPException(status_code=400, detail="Table number is required")
        table.table_number = table_number
    if payload.seats is not None:
        table.seats = payload.seats
    if payload.status is not None:
        table.status = payload.status.value
    db.commit()
    db.refresh(table)
    return envelope(table_out(table))


@router.patch("/{table_id}/status")
def update_table_status(
    table_id: str,
    payload: TableStatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
) -> dict:
    table = get_or_404(db, DiningTable, table_id, Messages.TABLE_NOT_FOUND)
    table.status = payload.status.value
    db.commit()
    db.refresh(table)
    data = table_out(table)
    background_tasks.add_task(hub.broadcast, TABLE_UPDATED, data)
    return envelope(data)


@router.delete("/{table_id}", status_code=204)
def delete_table(table_id: str, db: Session = Depends(get_db)) -> Response:
    table = get_or_404(db, DiningTable, table_id, Messages.TABLE_NOT_FOUND)
    db.delete(table)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Table is referenced by orders")
    return Response(status_code=204)
