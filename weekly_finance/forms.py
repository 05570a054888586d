"""
Form schemas for the HTML create/edit pages.

Each schema validates the raw submitted form and maps pydantic errors onto
one human readable message per field, so the page can show them next to the
inputs. Message lookup order: "<field>.<error type>", then "<field>", then
pydantic's own message.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Annotated, Any, ClassVar, Dict, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError

from .models import DEFAULT_CATEGORY_COLOR, MAX_ID, LoanStatus

Money = Annotated[Decimal, Field(ge=Decimal("0.01"), max_digits=10, decimal_places=2)]

AMOUNT_MESSAGES = {
    "amount.missing": "Amount is required.",
    "amount.greater_than_equal": "Amount must be greater than 0.",
    "amount.decimal_max_places": "Amount may not have more than 2 decimal places.",
    "amount.decimal_whole_digits": "Amount is too large.",
    "amount.decimal_max_digits": "Amount is too large.",
    "amount": "Amount must be a valid number.",
}

F = TypeVar("F", bound="FormSchema")


class FormSchema(BaseModel):
    messages: ClassVar[Dict[str, str]] = {}

    @classmethod
    def error_messages(cls, exc: ValidationError) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        for err in exc.errors():
            field = str(err["loc"][0]) if err["loc"] else "__all__"
            if field in errors:
                continue
            errors[field] = (
                cls.messages.get(f"{field}.{err['type']}")
                or cls.messages.get(field)
                or err["msg"]
            )
        return errors


def clean_form(form: Mapping[str, Any]) -> Dict[str, str]:
    """Strip strings and drop blank inputs so they count as missing."""
    data = {}
    for key, value in form.items():
        if not isinstance(value, str):
            continue
        value = value.strip()
        if value:
            data[key] = value
    return data


def validate_form(
    schema: Type[F], form: Mapping[str, Any]
) -> Tuple[Optional[F], Dict[str, str]]:
    try:
        return schema.model_validate(clean_form(form)), {}
    except ValidationError as exc:
        return None, schema.error_messages(exc)


class ExpenseForm(FormSchema):
    expense_category_id: int = Field(gt=0, le=MAX_ID)
    description: str = Field(max_length=255)
    amount: Money
    expense_date: date

    messages: ClassVar[Dict[str, str]] = {
        "expense_category_id.missing": "Please select a category.",
        "expense_category_id": "Selected category is invalid.",
        "description.missing": "Description is required.",
        "description": "Description may not be greater than 255 characters.",
        **AMOUNT_MESSAGES,
        "expense_date.missing": "Expense date is required.",
        "expense_date": "Please provide a valid date.",
    }


class WeeklyIncomeForm(FormSchema):
    amount: Money
    income_date: date
    source: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None

    messages: ClassVar[Dict[str, str]] = {
        **AMOUNT_MESSAGES,
        "income_date.missing": "Income date is required.",
        "income_date": "Please provide a valid date.",
        "source": "Source may not be greater than 255 characters.",
    }


class LoanForm(FormSchema):
    description: str = Field(max_length=255)
    amount: Money
    loan_date: date
    status: LoanStatus
    notes: Optional[str] = None

    messages: ClassVar[Dict[str, str]] = {
        "description.missing": "Description is required.",
        "description": "Description may not be greater than 255 characters.",
        **AMOUNT_MESSAGES,
        "loan_date.missing": "Loan date is required.",
        "loan_date": "Please provide a valid date.",
        "status.missing": "Status is required.",
        "status": "Status must be pending, paid, or cancelled.",
    }


class ExpenseCategoryForm(FormSchema):
    name: str = Field(max_length=255)
    color: str = Field(default=DEFAULT_CATEGORY_COLOR, pattern=r"^#[0-9A-Fa-f]{6}$")
    description: Optional[str] = None

    messages: ClassVar[Dict[str, str]] = {
        "name.missing": "Category name is required.",
        "name": "Category name may not be greater than 255 characters.",
        "color": "Color must be a hex value like #10B981.",
    }
