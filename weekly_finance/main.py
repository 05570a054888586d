# weekly_finance/main.py
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from .auth import NotAuthenticated, get_current_user_id
from .db import Base, engine
from .routers import auth, categories, dashboard, expenses, incomes, loans
from .views import STATIC_DIR, redirect, render

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = os.getenv("DEBUG", "").lower() in ("1", "true", "yes")
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-me")

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # no migration tooling: create missing tables on boot
    Base.metadata.create_all(bind=engine)
    logger.info("database ready at %s", engine.url.render_as_string(hide_password=True))
    yield


# ---------- App ----------
app = FastAPI(title="Weekly Finance", debug=DEBUG, lifespan=lifespan)
app.add_middleware(SessionMiddleware, secret_key=SECRET_KEY, same_site="lax")

if STATIC_DIR.exists():
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

app.include_router(auth.router, tags=["Auth"])
app.include_router(dashboard.router, tags=["Dashboard"])
app.include_router(expenses.router, prefix="/expenses", tags=["Expenses"])
app.include_router(incomes.router, prefix="/weekly-incomes", tags=["Weekly incomes"])
app.include_router(loans.router, prefix="/loans", tags=["Loans"])
app.include_router(categories.router, prefix="/expense-categories", tags=["Expense categories"])


# ---------- Health ----------
@app.get("/health-check")
def health_check():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


# ---------- Pages ----------
@app.get("/")
def welcome(request: Request):
    return render(request, "welcome.html", {"logged_in": get_current_user_id(request) is not None})


# ---------- Errors ----------
@app.exception_handler(NotAuthenticated)
async def not_authenticated_handler(request: Request, exc: NotAuthenticated):
    return redirect(request, "/login")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    content = {"error": "Internal Server Error"}
    if DEBUG:
        content["detail"] = str(exc)
    return JSONResponse(status_code=500, content=content)
