from abc import ABC, abstractmethod
from typing import Optional


class PatternStoreError(Exception):
    """Raised when a pattern store cannot read or write a value."""
    pass


class ExpenseUpdateError(Exception):
    """Raised when an expense's category cannot be changed."""
    pass


class ExpenseNotFoundError(ExpenseUpdateError):
    """Raised when an expense cannot be found."""
    pass


class LearnedPatternStore(ABC):
    """
    Abstract key-value store for the learned-pattern blob.

    The engine only needs get/set of strings by key, so the medium
    (SQLite file, memory, a server-side blob) is a deployment choice.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Retrieve a value by key.

        Args:
            key: Storage key

        Returns:
            Stored string, or None if the key is absent

        Raises:
            PatternStoreError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store a value, replacing any previous one.

        Raises:
            PatternStoreError: If the backend cannot be written
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete a key.

        Returns:
            True if deleted, False if not found
        """
        pass


class ExpenseCategoryUpdater(ABC):
    """
    Applies a category change to one expense.

    Stands in for the expense-update API the reclassification
    workflow reports accepted candidates to.
    """

    @abstractmethod
    def update_category(self, expense_id: str, category_id: str) -> None:
        """
        Move an expense to another category.

        Raises:
            ExpenseNotFoundError: If the expense doesn't exist
            ExpenseUpdateError: If the update is rejected
        """
        pass
