from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from cafe_pos.auth import get_current_user
from cafe_pos.common import envelope, get_or_404
from cafe_pos.constants import Messages
from cafe_pos.db import get_db
from cafe_pos.models import Branch, PosTerminal, User
from cafe_pos.serializers import terminal_out

router = APIRouter(prefix="/api/terminals", tags=["Terminals"], dependencies=[Depends(get_current_user)])


class TerminalCreate(BaseModel):
    model_config = {"json_schema_extra": {"example": {"terminal_name": "Counter 1", "branch_id": "<branch id>"}}}
    terminal_name: Optional[str] = None
    branch_id: Optional[str] = None
    user_id: Optional[str] = None


@router.post("", status_code=201)
def create_terminal(
    payload: TerminalCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> dict:
    if not payload.terminal_name or not payload.terminal_name.strip():
        raise HTTPException(status_code=400, detail="Terminal name is required")
    if payload.branch_id is not None:
        get_or_404(db, Branch, payload.branch_id, Messages.BRANCH_NOT_FOUND)
    operator_id = payload.user_id or user.id
    get_or_404(db, User, operator_id, Messages.USER_NOT_FOUND)
    terminal = PosTerminal(
        terminal_name=payload.terminal_name.strip(),
        branch_id=payload.branch_id,
        user_id=operator_id,
    )
    db.add(terminal)
    db.commit()
    db.refresh(terminal)
    return envelope(terminal_out(terminal))


@router.get("")
def list_terminals(db: Session = Depends(get_db)) -> dict:
    terminals = db.query(PosTerminal).order_by(PosTerminal.created_at.desc()).all()
    return envelope([terminal_out(terminal, with_latest_session=True) for terminal in terminals])


@router.get("/{terminal_id}")
def get_terminal(terminal_id: str, db: Session = Depends(get_db)) -> dict:
    terminal = get_or_404(db, PosTerminal, terminal_id, Messages.TERMINAL_NOT_FOUND)
    return envelope(terminal_out(terminal, with_latest_session=True))
