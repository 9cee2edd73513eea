from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

import pandas as pd

from expense_classifier.categorization.adapters import category_from_record, expense_from_record
from expense_classifier.domain.models import Category, Expense


class ExpenseFileParser(ABC):
    """
    Abstract base class for expense and category file parsers.

    This implements the Strategy pattern - each file format gets its own
    concrete parser; rows are mapped through the record adapters so every
    format yields the same Expense/Category models.
    """

    SUFFIXES: tuple = ()

    EXPENSE_REQUIRED_COLUMNS = ["description"]
    CATEGORY_REQUIRED_COLUMNS = ["id", "name"]

    @abstractmethod
    def read_frame(self, filepath: Path) -> pd.DataFrame:
        """
        Read a file into a DataFrame, one row per record.

        Raises:
            ValueError: If the file cannot be read in this format
        """
        pass

    def can_parse(self, filepath: Path) -> bool:
        """Whether this parser handles the file's suffix"""
        return Path(filepath).suffix.lower() in self.SUFFIXES

    def validate_file(self, filepath: Path) -> None:
        """
        Validate that the file exists and has a supported suffix.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If the suffix is not handled by this parser
        """
        path = Path(filepath)

        if not path.exists():
            raise FileNotFoundError(f"File does not exist on path {path}")

        if not self.can_parse(path):
            raise ValueError(
                f"{self.__class__.__name__} handles {', '.join(self.SUFFIXES)} files, got {path.suffix}"
            )

    def load_frame(self, filepath: Path, required_columns: List[str]) -> pd.DataFrame:
        """Validate, read and check the columns of a file"""
        self.validate_file(filepath)
        frame = self.read_frame(Path(filepath))

        missing = [c for c in required_columns if c not in frame.columns]
        if missing:
            raise ValueError(f"{filepath} is missing required columns: {', '.join(missing)}")

        return frame

    def parse(self, filepath: Path) -> List[Expense]:
        """
        Parse an expense file.

        Args:
            filepath: Path to the expense file

        Returns:
            List of Expense objects, in file order

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file format is invalid
        """
        frame = self.load_frame(filepath, self.EXPENSE_REQUIRED_COLUMNS)
        return [expense_from_record(record) for record in frame.to_dict(orient="records")]

    def parse_categories(self, filepath: Path) -> List[Category]:
        """Parse a category list file with id, name and optional color columns"""
        frame = self.load_frame(filepath, self.CATEGORY_REQUIRED_COLUMNS)
        return [category_from_record(record) for record in frame.to_dict(orient="records")]

    def __repr__(self):
        return f"{self.__class__.__name__}()"
