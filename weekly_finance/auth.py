from typing import Optional

from fastapi import Depends, Request
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .db import get_db
from .models import User

# pbkdf2_sha256 is pure Python, no bcrypt backend needed
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

SESSION_USER_KEY = "user_id"


class NotAuthenticated(Exception):
    """Raised by `current_user` when the session has no valid user."""


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        # malformed hash in the table
        return False


def get_current_user_id(request: Request) -> Optional[int]:
    v = request.session.get(SESSION_USER_KEY)
    if v is None:
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def login_user(request: Request, user: User) -> None:
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id


def logout_user(request: Request) -> None:
    request.session.clear()


def current_user(request: Request, db: Session = Depends(get_db)) -> User:
    user_id = get_current_user_id(request)
    user = db.get(User, user_id) if user_id is not None else None
    if user is None:
        raise NotAuthenticated()
    return user
