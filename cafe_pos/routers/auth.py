from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from cafe_pos.auth import create_access_token, get_current_user, get_password_hash, verify_password
from cafe_pos.common import envelope
from cafe_pos.constants import Messages
from cafe_pos.db import get_db
from cafe_pos.models import User
from cafe_pos.serializers import user_out

router = APIRouter(prefix="/api/auth", tags=["Auth"])


class SignupRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {"name": "Admin User", "email": "admin@cafe.test", "password": "password123"}
        }
    }
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    email: str
    password: str


@router.post("/signup", status_code=201)
def signup(payload: SignupRequest, db: Session = Depends(get_db)) -> dict:
    email = payload.email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=409, detail=Messages.USER_ALREADY_EXISTS)
    user = User(name=payload.name, email=email, password=get_password_hash(payload.password))
    db.add(user)
    db.commit()
    db.refresh(user)
    return envelope({"user": user_out(user), "token": create_access_token(user.id)})


@router.post("/login")
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> dict:
    user = db.query(User).filter(User.email == payload.email.strip().lower()).first()
    if not user or not verify_password(payload.password, user.password):
        raise HTTPException(status_code=401, detail=Messages.INVALID_CREDENTIALS)
    return envelope({"user": user_out(user), "token": create_access_token(user.id)})


@router.get("/me")
def me(user: User = Depends(get_current_user)) -> dict:
    return envelope({"user": user_out(user)})
