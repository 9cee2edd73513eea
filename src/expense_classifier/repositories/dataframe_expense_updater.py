import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

import pandas as pd

from expense_classifier.domain.models import Category
from expense_classifier.repositories.base import ExpenseCategoryUpdater, ExpenseNotFoundError

logger = logging.getLogger(__name__)


class DataFrameExpenseUpdater(ExpenseCategoryUpdater):
    """
    Applies category changes to an expense table held in a DataFrame.

    The frame must have an `id` column. Updated rows get the new
    `category_id` and, when the category is known, its `category_name`.

    Example:
        updater = DataFrameExpenseUpdater(pd.read_csv("expenses.csv"), categories)
        updater.update_category("42", "cat-utilities")
        updater.save(Path("expenses.reclassified.csv"))
    """

    def __init__(self, frame: pd.DataFrame, categories: Optional[Iterable[Category]] = None):
        if "id" not in frame.columns:
            raise ValueError("Expense table must have an 'id' column")

        self.frame = frame.copy()
        for column in ("category_id", "category_name"):
            if column in self.frame.columns:
                self.frame[column] = self.frame[column].astype(object)
            else:
                self.frame[column] = None

        self._names: Dict[str, str] = {c.id: c.name for c in (categories or [])}
        self._ids = self.frame["id"].astype(str)

    def update_category(self, expense_id: str, category_id: str) -> None:
        mask = self._ids == str(expense_id)
        if not mask.any():
            raise ExpenseNotFoundError(f"Expense with ID {expense_id} not found")

        self.frame.loc[mask, "category_id"] = category_id
        if category_id in self._names:
            self.frame.loc[mask, "category_name"] = self._names[category_id]

        logger.debug("Expense %s -> category %s", expense_id, category_id)

    def save(self, path: Path) -> None:
        """Write the updated table as CSV"""
        path.parent.mkdir(parents=True, exist_ok=True)
        self.frame.to_csv(path, index=False)
