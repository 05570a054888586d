import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth import hash_password, login_user, logout_user, verify_password
from ..db import get_db
from ..models import User
from ..views import redirect, render

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/login")
def login_page(request: Request):
    return render(request, "login.html", {"values": {}})


@router.post("/login")
async def login(request: Request, db: Session = Depends(get_db)):
    form = await request.form()
    username = str(form.get("username", "")).strip()
    password = str(form.get("password", ""))

    user = db.execute(select(User).where(User.username == username)).scalar_one_or_none()
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("failed login for %r", username)
        return render(
            request,
            "login.html",
            {"values": {"username": username}, "errors": {"username": "Invalid credentials."}},
            status_code=422,
        )

    login_user(request, user)
    logger.info("user %s logged in", user.id)
    return redirect(request, "/dashboard", "Welcome back!")


@router.get("/register")
def register_page(request: Request):
    return render(request, "register.html", {"values": {}})


@router.post("/register")
async def register(request: Request, db: Session = Depends(get_db)):
    form = await request.form()
    username = str(form.get("username", "")).strip()
    password = str(form.get("password", ""))

    errors = {}
    if not username:
        errors["username"] = "Username is required."
    elif len(username) > 50:
        errors["username"] = "Username may not be greater than 50 characters."
    elif db.execute(select(User.id).where(User.username == username)).first():
        errors["username"] = "Username is already taken."
    if len(password) < 8:
        errors["password"] = "Password must be at least 8 characters."
    if errors:
        return render(
            request,
            "register.html",
            {"values": {"username": username}, "errors": errors},
            status_code=422,
        )

    user = User(username=username, password_hash=hash_password(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("registered user %s", user.id)

    login_user(request, user)
    return redirect(request, "/dashboard", "Registration successful.")


@router.post("/logout")
def logout(request: Request):
    logout_user(request)
    return redirect(request, "/", "Logged out.")
