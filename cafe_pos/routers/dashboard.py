from decimal import Decimal

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from cafe_pos.auth import get_current_user
from cafe_pos.common import envelope, iso, money, now
from cafe_pos.db import get_db
from cafe_pos.models import PosSession, PosTerminal, User
from cafe_pos.routers.reports import completed_orders, day_bounds

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/stats")
def dashboard_stats(db: Session = Depends(get_db), user: User = Depends(get_current_user)) -> dict:
    terminal = db.query(PosTerminal).filter(PosTerminal.user_id == user.id).order_by(PosTerminal.created_at).first()
    branch_id = terminal.branch_id if terminal else None

    user_sessions = db.query(PosSession).join(PosTerminal).filter(PosTerminal.user_id == user.id)
    last_closed = (
        user_sessions.filter(PosSession.closed_at.is_not(None)).order_by(PosSession.closed_at.desc()).first()
    )
    active = user_sessions.filter(PosSession.closed_at.is_(None)).order_by(PosSession.opened_at.desc()).first()

    today_sales = Decimal("0")
    if branch_id is not None:
        today_sales = sum(
            (order.total_amount for order in completed_orders(db, branch_id, *day_bounds(now().date()))),
            Decimal("0"),
        )

    return envelope(
        {
            "last_closing_date": iso(last_closed.closed_at) if last_closed else None,
            "today_sales": money(today_sales),
            "active_session_opened_at": iso(active.opened_at) if active else None,
        }
    )
