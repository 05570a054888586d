from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from .models import LoanStatus

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

FLASH_KEY = "_flashes"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def money(value) -> str:
    value = Decimal(value or 0)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


templates.env.filters["money"] = money
templates.env.globals["loan_statuses"] = [s.value for s in LoanStatus]


def flash(request: Request, message: str, category: str = "success") -> None:
    # reassign so the session is marked modified
    request.session[FLASH_KEY] = [*request.session.get(FLASH_KEY, []), [category, message]]


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
):
    ctx = dict(context or {})
    ctx.setdefault("errors", {})
    ctx["flashes"] = request.session.pop(FLASH_KEY, [])
    return templates.TemplateResponse(request, name, ctx, status_code=status_code)


def redirect(request: Request, url: str, message: Optional[str] = None):
    if message:
        flash(request, message)
    return RedirectResponse(url=url, status_code=303)
