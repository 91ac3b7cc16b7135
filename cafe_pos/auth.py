import logging
from datetime import timedelta
from typing import Optional

from fastapi import Depends, Header, HTTPException
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from cafe_pos.common import now
from cafe_pos.config import settings
from cafe_pos.constants import Messages
from cafe_pos.db import get_db
from cafe_pos.models import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = now() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    return jwt.encode({"sub": user_id, "exp": expire}, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _unauthorized(reason: str) -> HTTPException:
    # Every rejection looks the same to the caller; only the log knows why.
    logger.info("auth rejected: %s", reason)
    return HTTPException(
        status_code=401,
        detail=Messages.AUTH_REQUIRED,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    if not authorization:
        raise _unauthorized("missing authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise _unauthorized("not a bearer credential")
    try:
        payload = jwt.decode(token.strip(), settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise _unauthorized(f"token verification failed: {exc}")
    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("token has no subject")
    user = db.get(User, user_id)
    if not user:
        raise _unauthorized("user not found")
    return user
