import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from .. import crud
from ..auth import current_user
from ..db import get_db
from ..forms import ExpenseForm, validate_form
from ..models import MAX_ID, Expense, User
from ..views import redirect, render

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_expense(db: Session, user: User, expense_id: int) -> Expense:
    expense = crud.get_owned(db, Expense, user.id, expense_id)
    if expense is None:
        raise HTTPException(status_code=404, detail="Expense not found")
    return expense


async def _validated(request: Request, db: Session):
    form = await request.form()
    data, errors = validate_form(ExpenseForm, form)
    if data is not None and crud.get_category(db, data.expense_category_id) is None:
        data, errors = None, {"expense_category_id": "Selected category is invalid."}
    return form, data, errors


@router.get("")
def index(
    request: Request,
    page: int = Query(1, ge=1, le=MAX_ID),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    return render(
        request,
        "expenses/index.html",
        {
            "user": user,
            "expenses": crud.list_owned(db, Expense, user.id, page),
            "categories": crud.all_categories(db),
        },
    )


@router.get("/create")
def create_form(request: Request, db: Session = Depends(get_db), user: User = Depends(current_user)):
    return render(
        request,
        "expenses/form.html",
        {"user": user, "expense": None, "values": {}, "categories": crud.all_categories(db)},
    )


@router.post("")
async def store(request: Request, db: Session = Depends(get_db), user: User = Depends(current_user)):
    form, data, errors = await _validated(request, db)
    if errors:
        return render(
            request,
            "expenses/form.html",
            {
                "user": user,
                "expense": None,
                "values": dict(form),
                "errors": errors,
                "categories": crud.all_categories(db),
            },
            status_code=422,
        )

    expense = crud.create(db, Expense, {"user_id": user.id, **data.model_dump()})
    logger.info("user %s created expense %s (%s)", user.id, expense.id, expense.amount)
    return redirect(request, "/expenses", "Expense created successfully.")


@router.get("/{expense_id}")
def show(
    expense_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    return render(
        request,
        "expenses/show.html",
        {"user": user, "expense": _get_expense(db, user, expense_id)},
    )


@router.get("/{expense_id}/edit")
def edit(
    expense_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    expense = _get_expense(db, user, expense_id)
    return render(
        request,
        "expenses/form.html",
        {
            "user": user,
            "expense": expense,
            "values": {
                "expense_category_id": expense.expense_category_id,
                "description": expense.description,
                "amount": expense.amount,
                "expense_date": expense.expense_date.isoformat(),
            },
            "categories": crud.all_categories(db),
        },
    )


# HTML forms can only POST, so updates accept both verbs
@router.api_route("/{expense_id}", methods=["PUT", "POST"])
async def update(
    expense_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    expense = _get_expense(db, user, expense_id)
    form, data, errors = await _validated(request, db)
    if errors:
        return render(
            request,
            "expenses/form.html",
            {
                "user": user,
                "expense": expense,
                "values": dict(form),
                "errors": errors,
                "categories": crud.all_categories(db),
            },
            status_code=422,
        )

    crud.update(db, expense, data.model_dump())
    logger.info("user %s updated expense %s", user.id, expense.id)
    return redirect(request, "/expenses", "Expense updated successfully.")


@router.delete("/{expense_id}")
@router.post("/{expense_id}/delete")
def destroy(
    expense_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    expense = _get_expense(db, user, expense_id)
    crud.delete(db, expense)
    logger.info("user %s deleted expense %s", user.id, expense_id)
    return redirect(request, "/expenses", "Expense deleted successfully.")
