import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from .. import crud
from ..auth import current_user
from ..db import get_db
from ..forms import LoanForm, validate_form
from ..models import MAX_ID, Loan, LoanStatus, User
from ..views import redirect, render

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_loan(db: Session, user: User, loan_id: int) -> Loan:
    loan = crud.get_owned(db, Loan, user.id, loan_id)
    if loan is None:
        raise HTTPException(status_code=404, detail="Loan not found")
    return loan


def _form_page(request, user, loan, values, errors=None, status_code=200):
    return render(
        request,
        "loans/form.html",
        {"user": user, "loan": loan, "values": values, "errors": errors or {}},
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
        "loans/index.html",
        {"user": user, "loans": crud.list_owned(db, Loan, user.id, page)},
    )


@router.get("/create")
def create_form(request: Request, user: User = Depends(current_user)):
    return _form_page(request, user, None, {"status": LoanStatus.PENDING.value})


@router.post("")
async def store(request: Request, db: Session = Depends(get_db), user: User = Depends(current_user)):
    form = await request.form()
    data, errors = validate_form(LoanForm, form)
    if errors:
        return _form_page(request, user, None, dict(form), errors, status_code=422)

    loan = crud.create(db, Loan, {"user_id": user.id, **data.model_dump()})
    logger.info("user %s recorded loan %s (%s, %s)", user.id, loan.id, loan.amount, loan.status.value)
    return redirect(request, "/loans", "Loan created successfully.")


@router.get("/{loan_id}")
def show(
    loan_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    return render(request, "loans/show.html", {"user": user, "loan": _get_loan(db, user, loan_id)})


@router.get("/{loan_id}/edit")
def edit(
    loan_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    loan = _get_loan(db, user, loan_id)
    values = {
        "description": loan.description,
        "amount": loan.amount,
        "loan_date": loan.loan_date.isoformat(),
        "status": loan.status.value,
        "notes": loan.notes or "",
    }
    return _form_page(request, user, loan, values)


@router.api_route("/{loan_id}", methods=["PUT", "POST"])
async def update(
    loan_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    loan = _get_loan(db, user, loan_id)
    form = await request.form()
    data, errors = validate_form(LoanForm, form)
    if errors:
        return _form_page(request, user, loan, dict(form), errors, status_code=422)

    crud.update(db, loan, data.model_dump())
    logger.info("user %s updated loan %s (status %s)", user.id, loan.id, loan.status.value)
    return redirect(request, "/loans", "Loan updated successfully.")


@router.delete("/{loan_id}")
@router.post("/{loan_id}/delete")
def destroy(
    loan_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    loan = _get_loan(db, user, loan_id)
    crud.delete(db, loan)
    logger.info("user %s deleted loan %s", user.id, loan_id)
    return redirect(request, "/loans", "Loan deleted successfully.")
