import os

# must be set before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from weekly_finance.auth import hash_password
from weekly_finance.db import Base, SessionLocal, engine
from weekly_finance.main import app
from weekly_finance.models import Expense, ExpenseCategory, Loan, LoanStatus, User, WeeklyIncome
from weekly_finance.routers.dashboard import get_today

# a Wednesday; its week runs 2024-01-15 (Mon) .. 2024-01-21 (Sun)
TODAY = date(2024, 1, 17)
PASSWORD = "correct-horse-battery"


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def _make_user(db, username):
    u = User(username=username, password_hash=hash_password(PASSWORD))
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def user(db):
    return _make_user(db, "alice")


@pytest.fixture
def other_user(db):
    return _make_user(db, "bob")


@pytest.fixture
def client():
    app.dependency_overrides[get_today] = lambda: TODAY
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_client(client, user):
    resp = client.post(
        "/login",
        data={"username": user.username, "password": PASSWORD},
        follow_redirects=False,
    )
    assert resp.status_code == 303
    return client


@pytest.fixture
def make_category(db):
    def make(name="Food & Groceries", color="#10B981", description=None):
        c = ExpenseCategory(name=name, color=color, description=description)
        db.add(c)
        db.commit()
        db.refresh(c)
        return c

    return make


@pytest.fixture
def category(make_category):
    return make_category()


@pytest.fixture
def make_expense(db, category):
    def make(user, amount="10.00", expense_date=TODAY, description="Groceries", category_id=None):
        e = Expense(
            user_id=user.id,
            expense_category_id=category_id or category.id,
            description=description,
            amount=Decimal(amount),
            expense_date=expense_date,
        )
        db.add(e)
        db.commit()
        db.refresh(e)
        return e

    return make


@pytest.fixture
def make_income(db):
    def make(user, amount="100.00", income_date=TODAY, source=None, notes=None):
        i = WeeklyIncome(
            user_id=user.id,
            amount=Decimal(amount),
            income_date=income_date,
            source=source,
            notes=notes,
        )
        db.add(i)
        db.commit()
        db.refresh(i)
        return i

    return make


@pytest.fixture
def make_loan(db):
    def make(user, amount="50.00", loan_date=TODAY, status=LoanStatus.PENDING, description="Lent to Sam"):
        loan = Loan(
            user_id=user.id,
            description=description,
            amount=Decimal(amount),
            loan_date=loan_date,
            status=status,
        )
        db.add(loan)
        db.commit()
        db.refresh(loan)
        return loan

    return make
