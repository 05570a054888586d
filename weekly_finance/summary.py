"""
Weekly financial summary shown on the dashboard.

The week runs Monday through Sunday and both ends are inclusive, so a record
dated on either boundary day counts toward that week. Pending loans are an
all-time liability and are not filtered by date.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .models import Expense, Loan, LoanStatus, WeeklyIncome

CENTS = Decimal("0.01")


def week_bounds(day: date) -> Tuple[date, date]:
    """Return (monday, sunday) of the week containing `day`."""
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


def _money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        # sqlite hands back floats for SUM over NUMERIC
        value = Decimal(str(value))
    return value.quantize(CENTS)


@dataclass(frozen=True)
class WeeklySummary:
    week_start: date
    week_end: date
    weekly_income: Decimal
    weekly_expenses: Decimal
    pending_loans: Decimal

    @property
    def remaining_balance(self) -> Decimal:
        return self.weekly_income - self.weekly_expenses - self.pending_loans

    def as_props(self) -> Dict[str, Decimal]:
        return {
            "weeklyIncome": self.weekly_income,
            "weeklyExpenses": self.weekly_expenses,
            "pendingLoans": self.pending_loans,
            "remainingBalance": self.remaining_balance,
        }


def weekly_summary(db: Session, user_id: int, today: date) -> WeeklySummary:
    start, end = week_bounds(today)

    income = db.execute(
        select(func.sum(WeeklyIncome.amount))
        .where(WeeklyIncome.user_id == user_id)
        .where(WeeklyIncome.income_date.between(start, end))
    ).scalar()

    expenses = db.execute(
        select(func.sum(Expense.amount))
        .where(Expense.user_id == user_id)
        .where(Expense.expense_date.between(start, end))
    ).scalar()

    pending = db.execute(
        select(func.sum(Loan.amount))
        .where(Loan.user_id == user_id)
        .where(Loan.status == LoanStatus.PENDING)
    ).scalar()

    return WeeklySummary(
        week_start=start,
        week_end=end,
        weekly_income=_money(income),
        weekly_expenses=_money(expenses),
        pending_loans=_money(pending),
    )
