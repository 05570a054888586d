from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session, selectinload

from . import models

PER_PAGE = 10
RECENT_LIMIT = 5

DEFAULT_CATEGORIES = [
    {
        "name": "Food & Groceries",
        "color": "#10B981",
        "description": "Supermarket, restaurants, and food delivery expenses",
    },
    {
        "name": "Transportation",
        "color": "#3B82F6",
        "description": "Gas, public transport, taxi, and vehicle maintenance",
    },
    {
        "name": "Utilities",
        "color": "#F59E0B",
        "description": "Electricity, water, gas, internet, and phone bills",
    },
    {
        "name": "Entertainment",
        "color": "#8B5CF6",
        "description": "Movies, games, subscriptions, and leisure activities",
    },
    {
        "name": "Healthcare",
        "color": "#EF4444",
        "description": "Medical expenses, pharmacy, and health insurance",
    },
    {
        "name": "Household",
        "color": "#06B6D4",
        "description": "Cleaning supplies, furniture, and home maintenance",
    },
    {
        "name": "Personal Care",
        "color": "#EC4899",
        "description": "Cosmetics, haircuts, and personal hygiene products",
    },
    {
        "name": "Miscellaneous",
        "color": "#6B7280",
        "description": "Other expenses that don't fit in specific categories",
    },
]


@dataclass
class Page:
    items: List[Any]
    page: int
    per_page: int
    total: int

    @property
    def pages(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages


def _latest(stmt, model):
    return stmt.order_by(desc(model.created_at), desc(model.id))


def paginate(db: Session, stmt, page: int = 1, per_page: int = PER_PAGE) -> Page:
    total = db.execute(select(func.count()).select_from(stmt.order_by(None).subquery())).scalar_one()
    page = max(1, page)
    items = db.execute(stmt.limit(per_page).offset((page - 1) * per_page)).scalars().all()
    return Page(items=list(items), page=page, per_page=per_page, total=total)


# ---------- Owned records (expenses / incomes / loans) ----------
def _owned_query(model, user_id: int):
    stmt = select(model).where(model.user_id == user_id)
    if model is models.Expense:
        stmt = stmt.options(selectinload(models.Expense.category))
    return stmt


def list_owned(db: Session, model, user_id: int, page: int = 1) -> Page:
    return paginate(db, _latest(_owned_query(model, user_id), model), page)


def recent_owned(db: Session, model, user_id: int, limit: int = RECENT_LIMIT):
    stmt = _latest(_owned_query(model, user_id), model).limit(limit)
    return db.execute(stmt).scalars().all()


def _valid_id(record_id: int) -> bool:
    return 0 < record_id <= models.MAX_ID


def get_owned(db: Session, model, user_id: int, record_id: int):
    if not _valid_id(record_id):
        return None
    return db.execute(
        _owned_query(model, user_id).where(model.id == record_id)
    ).scalar_one_or_none()


# ---------- Writes ----------
def create(db: Session, model: Type[models.Base], fields: Dict[str, Any]):
    obj = model(**fields)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def update(db: Session, obj, fields: Dict[str, Any]):
    for name, value in fields.items():
        setattr(obj, name, value)
    db.commit()
    db.refresh(obj)
    return obj


def delete(db: Session, obj) -> None:
    db.delete(obj)
    db.commit()


# ---------- Categories (global) ----------
def all_categories(db: Session):
    return db.execute(
        select(models.ExpenseCategory).order_by(models.ExpenseCategory.name)
    ).scalars().all()


def list_categories(db: Session, page: int = 1) -> Page:
    stmt = _latest(select(models.ExpenseCategory), models.ExpenseCategory)
    return paginate(db, stmt, page)


def get_category(db: Session, category_id: int) -> Optional[models.ExpenseCategory]:
    if not _valid_id(category_id):
        return None
    return db.get(models.ExpenseCategory, category_id)


def category_expense_count(db: Session, category_id: int) -> int:
    return db.execute(
        select(func.count(models.Expense.id)).where(
            models.Expense.expense_category_id == category_id
        )
    ).scalar_one()


def seed_categories(db: Session) -> int:
    """Insert the default categories into an empty table. Returns rows added."""
    if db.execute(select(models.ExpenseCategory.id).limit(1)).first():
        return 0
    db.add_all(models.ExpenseCategory(**row) for row in DEFAULT_CATEGORIES)
    db.commit()
    return len(DEFAULT_CATEGORIES)
