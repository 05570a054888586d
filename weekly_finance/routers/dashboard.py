from datetime import date

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from .. import crud
from ..auth import current_user
from ..db import get_db
from ..models import Expense, Loan, User, WeeklyIncome
from ..summary import weekly_summary
from ..views import render

router = APIRouter()


def get_today() -> date:
    """Current date for the weekly window; overridden in tests."""
    return date.today()


@router.get("/dashboard")
def dashboard(
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
    today: date = Depends(get_today),
):
    summary = weekly_summary(db, user.id, today)
    return render(
        request,
        "dashboard.html",
        {
            "user": user,
            "summary": summary,
            "totals": summary.as_props(),
            "recent_expenses": crud.recent_owned(db, Expense, user.id),
            "recent_incomes": crud.recent_owned(db, WeeklyIncome, user.id),
            "recent_loans": crud.recent_owned(db, Loan, user.id),
        },
    )
