"""
Expense categories are shared by every user, so nothing here is scoped to
the session user beyond requiring a login.

A category that still has expenses cannot be deleted; the list page is
re-rendered with an error and status 409 instead.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import crud
from ..auth import current_user
from ..db import get_db
from ..forms import ExpenseCategoryForm, validate_form
from ..models import DEFAULT_CATEGORY_COLOR, MAX_ID, ExpenseCategory, User
from ..views import redirect, render

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_category(db: Session, category_id: int) -> ExpenseCategory:
    category = crud.get_category(db, category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Expense category not found")
    return category


def _form_page(request, user, category, values, errors=None, status_code=200):
    return render(
        request,
        "expense_categories/form.html",
        {"user": user, "category": category, "values": values, "errors": errors or {}},
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
        "expense_categories/index.html",
        {"user": user, "categories": crud.list_categories(db, page)},
    )


@router.get("/create")
def create_form(request: Request, user: User = Depends(current_user)):
    return _form_page(request, user, None, {"color": DEFAULT_CATEGORY_COLOR})


@router.post("")
async def store(request: Request, db: Session = Depends(get_db), user: User = Depends(current_user)):
    form = await request.form()
    data, errors = validate_form(ExpenseCategoryForm, form)
    if errors:
        return _form_page(request, user, None, dict(form), errors, status_code=422)

    category = crud.create(db, ExpenseCategory, data.model_dump())
    logger.info("user %s created category %s (%s)", user.id, category.id, category.name)
    return redirect(request, "/expense-categories", "Category created successfully.")


@router.get("/{category_id}")
def show(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    category = _get_category(db, category_id)
    return render(
        request,
        "expense_categories/show.html",
        {
            "user": user,
            "category": category,
            "expense_count": crud.category_expense_count(db, category.id),
        },
    )


@router.get("/{category_id}/edit")
def edit(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    category = _get_category(db, category_id)
    values = {
        "name": category.name,
        "color": category.color,
        "description": category.description or "",
    }
    return _form_page(request, user, category, values)


@router.api_route("/{category_id}", methods=["PUT", "POST"])
async def update(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    category = _get_category(db, category_id)
    form = await request.form()
    data, errors = validate_form(ExpenseCategoryForm, form)
    if errors:
        return _form_page(request, user, category, dict(form), errors, status_code=422)

    crud.update(db, category, data.model_dump())
    logger.info("user %s updated category %s", user.id, category.id)
    return redirect(request, "/expense-categories", "Category updated successfully.")


def _in_use_page(request, db, user, category, in_use, page):
    return render(
        request,
        "expense_categories/index.html",
        {
            "user": user,
            "categories": crud.list_categories(db, page),
            "errors": {
                "category": f'Category "{category.name}" is used by {in_use} '
                f'expense{"s" if in_use != 1 else ""} and cannot be deleted.'
            },
        },
        status_code=409,
    )


@router.delete("/{category_id}")
@router.post("/{category_id}/delete")
def destroy(
    category_id: int,
    request: Request,
    page: int = Query(1, ge=1, le=MAX_ID),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    category = _get_category(db, category_id)

    in_use = crud.category_expense_count(db, category.id)
    if in_use:
        logger.warning(
            "user %s tried to delete category %s used by %s expenses", user.id, category.id, in_use
        )
        return _in_use_page(request, db, user, category, in_use, page)

    try:
        crud.delete(db, category)
    except IntegrityError:
        # an expense was attached after the usage check
        db.rollback()
        in_use = crud.category_expense_count(db, category.id)
        logger.warning("delete of category %s lost a race with a new expense", category.id)
        return _in_use_page(request, db, user, category, in_use, page)

    logger.info("user %s deleted category %s", user.id, category_id)
    return redirect(request, "/expense-categories", "Category deleted successfully.")
