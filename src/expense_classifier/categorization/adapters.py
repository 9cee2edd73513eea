"""
Boundary adapters from external records to engine models.

External expense records name the category inconsistently
(`category_name`, nested `categories.name`, or plain `category`);
these functions settle that before a record reaches the engine.
"""
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

import pandas as pd

from expense_classifier.domain.models import Category, Expense


def _is_missing(value: Any) -> bool:
    """None, empty string, NaN or NaT"""
    if value is None:
        return True
    if isinstance(value, (float, Decimal)) or value is pd.NaT:
        return bool(pd.isna(value))
    return isinstance(value, str) and not value.strip()


def _text(value: Any) -> str:
    return "" if _is_missing(value) else str(value)


def _optional_str(value: Any) -> Optional[str]:
    if _is_missing(value):
        return None
    # pandas reads integer ids as floats when the column has gaps
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _to_decimal(value: Any) -> Optional[Decimal]:
    if _is_missing(value):
        return None
    try:
        return Decimal(str(value).replace(",", "").strip())
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")


def _to_date(value: Any) -> Optional[date]:
    if _is_missing(value):
        return None
    # pandas.Timestamp is a datetime subclass
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValueError(f"Invalid expense date: {value!r}")


def category_name_of(record: Mapping[str, Any]) -> Optional[str]:
    """Current category name of an expense record, whichever field carries it"""
    name = record.get("category_name")
    if not _is_missing(name):
        return str(name)

    nested = record.get("categories")
    if isinstance(nested, Mapping) and not _is_missing(nested.get("name")):
        return str(nested["name"])

    name = record.get("category")
    if not _is_missing(name):
        return str(name)

    return None


def expense_from_record(record: Mapping[str, Any]) -> Expense:
    """
    Map a heterogeneous expense record into an Expense.

    Raises:
        ValueError: If amount or date are present but unparseable
    """
    return Expense(
        id=_optional_str(record.get("id")),
        description=_text(record.get("description")),
        notes=_text(record.get("notes")),
        amount=_to_decimal(record.get("amount")),
        expense_date=_to_date(record.get("expense_date")),
        category_name=category_name_of(record),
    )


def category_from_record(record: Mapping[str, Any]) -> Category:
    """
    Map a category record ({id, name, color}) into a Category.

    Raises:
        ValueError: If id or name is missing
    """
    category_id = _optional_str(record.get("id"))
    name = _optional_str(record.get("name"))
    if category_id is None or name is None:
        raise ValueError(f"Category record needs 'id' and 'name': {dict(record)!r}")

    return Category(id=category_id, name=name, color=_text(record.get("color")))
