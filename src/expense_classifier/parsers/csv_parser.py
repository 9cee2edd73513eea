from pathlib import Path

import pandas as pd

from expense_classifier.parsers.base import ExpenseFileParser


class CsvExpenseParser(ExpenseFileParser):
    """
    Parser for CSV exports of the expense and category tables.

    Every cell is read as text so ids keep their exact form; empty
    cells become "" and are treated as missing by the adapters.
    """

    SUFFIXES = (".csv",)

    def read_frame(self, filepath: Path) -> pd.DataFrame:
        try:
            frame = pd.read_csv(filepath, dtype=str, keep_default_na=False)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise ValueError(f"Invalid CSV file {filepath}: {e}") from e

        frame.columns = [str(c).strip() for c in frame.columns]
        return frame
