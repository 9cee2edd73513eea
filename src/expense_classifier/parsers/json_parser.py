from pathlib import Path

import pandas as pd

from expense_classifier.parsers.base import ExpenseFileParser


class JsonExpenseParser(ExpenseFileParser):
    """
    Parser for JSON arrays of records, as returned by the expense API.

    Nested objects (e.g. `"categories": {"name": "Utilities"}`) are kept
    as dicts so the adapters can read the category name from them.
    """

    SUFFIXES = (".json",)

    def read_frame(self, filepath: Path) -> pd.DataFrame:
        try:
            frame = pd.read_json(filepath, orient="records", dtype=False, convert_dates=False)
        except ValueError as e:
            raise ValueError(f"Invalid JSON file {filepath}: {e}") from e

        return frame
