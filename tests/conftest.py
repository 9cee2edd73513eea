import pytest
from datetime import date
from decimal import Decimal
from typing import List

from expense_classifier.categorization.catalog import PatternCatalog
from expense_classifier.categorization.engine import SuggestionEngine
from expense_classifier.domain.models import Category, Expense
from expense_classifier.parsers.factory import ParserFactory

TEST_CATALOG_CONFIG = {
    "version": 1,
    "categories": {
        "Utilities": {"weight": 1.2, "keywords": ["electricity bill", "water bill", "wapda"]},
        "Office Supplies": {"weight": 1.0, "keywords": ["stationery", "attendance register", "printer ink"]},
        "Food & Dining": {"weight": 0.9, "keywords": ["lunch", "tea", "catering"]},
        "Security": {"weight": 1.0, "keywords": ["guard", "cctv"]},
    },
}


@pytest.fixture
def catalog() -> PatternCatalog:
    """Small catalog; 'Security' is deliberately not a registered category"""
    return PatternCatalog.from_config(TEST_CATALOG_CONFIG)


@pytest.fixture
def categories() -> List[Category]:
    return [
        Category(id="cat-utilities", name="Utilities", color="#f59e0b"),
        Category(id="cat-office", name="Office Supplies", color="#3b82f6"),
        Category(id="cat-food", name="Food & Dining", color="#10b981"),
        Category(id="cat-misc", name="Miscellaneous", color="#6b7280"),
    ]


@pytest.fixture
def engine(categories, catalog) -> SuggestionEngine:
    return SuggestionEngine(categories, catalog=catalog)


@pytest.fixture
def make_expense():
    """Factory for expenses with sensible defaults"""
    counter = {"n": 0}

    def _make(description: str, category_name: str = "Miscellaneous", notes: str = "") -> Expense:
        counter["n"] += 1
        return Expense(
            id=str(counter["n"]),
            description=description,
            notes=notes,
            amount=Decimal("100.00"),
            expense_date=date(2025, 1, counter["n"] % 28 + 1),
            category_name=category_name,
        )

    return _make


@pytest.fixture
def clean_parser_registry():
    """Run with an empty parser registry and restore it afterwards"""
    saved = dict(ParserFactory._registry), ParserFactory._locked
    ParserFactory._reset()
    yield ParserFactory
    ParserFactory._registry, ParserFactory._locked = saved
