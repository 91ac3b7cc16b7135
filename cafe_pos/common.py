from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from cafe_pos.request_id import get_request_id


def meta(warnings: Optional[list[str]] = None) -> dict:
    return {
        "request_id": get_request_id(),
        "warnings": warnings or [],
    }


def envelope(data: Any, warnings: Optional[list[str]] = None) -> dict:
    return {"data": data, "meta": meta(warnings)}


def now() -> datetime:
    return datetime.now(timezone.utc)


def money(value: Optional[Decimal]) -> float:
    return float(value or 0)


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def get_or_404(db: Session, model, object_id: str, detail: str):
    obj = db.get(model, object_id)
    if not obj:
        raise HTTPException(status_code=404, detail=detail)
    return obj


def as_utc(value: datetime) -> datetime:
    """Normalise a stored timestamp to UTC; naive values are already UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def table_sort_key(table_number: str) -> tuple:
    # Numeric labels sort by value ("2" before "10"), then named tables alphabetically.
    label = (table_number or "").strip()
    if label.isdigit():
        return (0, int(label), "")
    return (1, 0, label.lower())
