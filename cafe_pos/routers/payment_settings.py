from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from cafe_pos.auth import get_current_user
from cafe_pos.common import envelope, get_or_404
from cafe_pos.constants import Messages
from cafe_pos.db import get_db
from cafe_pos.models import PaymentSettings, PosTerminal
from cafe_pos.serializers import payment_settings_out

router = APIRouter(
    prefix="/api/payment-settings",
    tags=["Payment Settings"],
    dependencies=[Depends(get_current_user)],
)


class PaymentSettingsUpdate(BaseModel):
    model_config = {"json_schema_extra": {"example": {"use_upi": True, "upi_id": "cafe@upi"}}}
    use_cash: Optional[bool] = None
    use_digital: Optional[bool] = None
    use_upi: Optional[bool] = None
    upi_id: Optional[str] = None
    upi_name: Optional[str] = None
    merchant_code: Optional[str] = None


def _settings_for(db: Session, terminal_id: str) -> PaymentSettings:
    get_or_404(db, PosTerminal, terminal_id, Messages.TERMINAL_NOT_FOUND)
    settings = db.query(PaymentSettings).filter(PaymentSettings.terminal_id == terminal_id).first()
    if settings is None:
        settings = PaymentSettings(terminal_id=terminal_id, use_cash=True, use_digital=True, use_upi=False, upi_id="")
        db.add(settings)
        db.commit()
        db.refresh(settings)
    return settings


@router.get("/terminal/{terminal_id}")
def get_terminal_settings(terminal_id: str, db: Session = Depends(get_db)) -> dict:
    return envelope(payment_settings_out(_settings_for(db, terminal_id)))


@router.put("/terminal/{terminal_id}")
def update_terminal_settings(
    terminal_id: str, payload: PaymentSettingsUpdate, db: Session = Depends(get_db)
) -> dict:
    settings = _settings_for(db, terminal_id)
    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(settings, field, value)
    db.commit()
    db.refresh(settings)
    return envelope(payment_settings_out(settings))
