from decimal import Decimal

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session

from cafe_pos.auth import get_current_user
from cafe_pos.common import envelope, get_or_404, now
from cafe_pos.constants import Messages
from cafe_pos.db import get_db
from cafe_pos.models import Order, PosSession, PosTerminal
from cafe_pos.realtime import SESSION_CLOSED, SESSION_OPENED, RealtimeHub, get_hub
from cafe_pos.serializers import session_out

router = APIRouter(prefix="/api/sessions", tags=["Sessions"], dependencies=[Depends(get_current_user)])


class SessionOpen(BaseModel):
    terminal_id: str


def _open_session_for(db: Session, terminal_id: str):
    return (
        db.query(PosSession)
        .filter(PosSession.terminal_id == terminal_id, PosSession.closed_at.is_(None))
        .first()
    )


@router.post("/open", status_code=201)
def open_session(
    payload: SessionOpen,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
) -> dict:
    get_or_404(db, PosTerminal, payload.terminal_id, Messages.TERMINAL_NOT_FOUND)
    if _open_session_for(db, payload.terminal_id):
        raise HTTPException(status_code=400, detail=Messages.SESSION_ALREADY_OPEN)
    session = PosSession(terminal_id=payload.terminal_id, total_sales=Decimal("0"))
    db.add(session)
    db.commit()
    db.refresh(session)
    data = session_out(session)
    background_tasks.add_task(hub.broadcast, SESSION_OPENED, data)
    return envelope(data)


@router.post("/{session_id}/close")
def close_session(
    session_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
) -> dict:
    session = get_or_404(db, PosSession, session_id, Messages.SESSION_NOT_FOUND)
    if session.closed_at is not None:
        raise HTTPException(status_code=400, detail=Messages.SESSION_ALREADY_CLOSED)
    total = db.query(func.coalesce(func.sum(Order.total_amount), 0)).filter(Order.session_id == session_id).scalar()
    session.total_sales = Decimal(str(total))
    session.closed_at = now()
    db.commit()
    db.refresh(session)
    data = session_out(session)
    background_tasks.add_task(hub.broadcast, SESSION_CLOSED, data)
    return envelope(data)


@router.get("/active")
def list_active_sessions(db: Session = Depends(get_db)) -> dict:
    sessions = db.query(PosSession).filter(PosSession.closed_at.is_(None)).order_by(PosSession.opened_at).all()
    return envelope([session_out(session) for session in sessions])


@router.get("/current")
def get_current_session(terminal_id: str = Query(...), db: Session = Depends(get_db)) -> dict:
    session = _open_session_for(db, terminal_id)
    if not session:
        raise HTTPException(status_code=404, detail="No active session found for this terminal")
    return envelope(session_out(session))


@router.get("/{session_id}")
def get_session(session_id: str, db: Session = Depends(get_db)) -> dict:
    session = get_or_404(db, PosSession, session_id, Messages.SESSION_NOT_FOUND)
    return envelope(session_out(session, with_orders=True))
