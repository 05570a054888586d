import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from .. import crud
from ..auth import current_user
from ..db import get_db
from ..forms import WeeklyIncomeForm, validate_form
from ..models import MAX_ID, User, WeeklyIncome
from ..views import redirect, render

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_income(db: Session, user: User, income_id: int) -> WeeklyIncome:
    income = crud.get_owned(db, WeeklyIncome, user.id, income_id)
    if income is None:
        raise HTTPException(status_code=404, detail="Weekly income not found")
    return income


def _form_page(request, user, income, values, errors=None, status_code=200):
    return render(
        request,
        "weekly_incomes/form.html",
        {"user": user, "income": income, "values": values, "errors": errors or {}},
        status_code=status_code,
    )


@router.get("")
def index(
    request: Request,
    page: int = Query(1, ge=1, le=MAX_ID),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    return render(
        request,
        "weekly_incomes/index.html",
        {"user": user, "incomes": crud.list_owned(db, WeeklyIncome, user.id, page)},
    )


@router.get("/create")
def create_form(request: Request, user: User = Depends(current_user)):
    return _form_page(request, user, None, {})


@router.post("")
async def store(request: Request, db: Session = Depends(get_db), user: User = Depends(current_user)):
    form = await request.form()
    data, errors = validate_form(WeeklyIncomeForm, form)
    if errors:
        return _form_page(request, user, None, dict(form), errors, status_code=422)

    income = crud.create(db, WeeklyIncome, {"user_id": user.id, **data.model_dump()})
    logger.info("user %s recorded income %s (%s)", user.id, income.id, income.amount)
    return redirect(request, "/weekly-incomes", "Weekly income created successfully.")


@router.get("/{income_id}")
def show(
    income_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    return render(
        request,
        "weekly_incomes/show.html",
        {"user": user, "income": _get_income(db, user, income_id)},
    )


@router.get("/{income_id}/edit")
def edit(
    income_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    income = _get_income(db, user, income_id)
    values = {
        "amount": income.amount,
        "income_date": income.income_date.isoformat(),
        "source": income.source or "",
        "notes": income.notes or "",
    }
    return _form_page(request, user, income, values)


@router.api_route("/{income_id}", methods=["PUT", "POST"])
async def update(
    income_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    income = _get_income(db, user, income_id)
    form = await request.form()
    data, errors = validate_form(WeeklyIncomeForm, form)
    if errors:
        return _form_page(request, user, income, dict(form), errors, status_code=422)

    crud.update(db, income, data.model_dump())
    logger.info("user %s updated income %s", user.id, income.id)
    return redirect(request, "/weekly-incomes", "Weekly income updated successfully.")


@router.delete("/{income_id}")
@router.post("/{income_id}/delete")
def destroy(
    income_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    income = _get_income(db, user, income_id)
    crud.delete(db, income)
    logger.info("user %s deleted income %s", user.id, income_id)
    return redirect(request, "/weekly-incomes", "Weekly income deleted successfully.")
