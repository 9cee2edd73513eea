import logging
import math
from collections import Counter, defaultdict
from typing import Dict, Iterable, List

from expense_classifier.categorization.categories import (
    MIN_LEARNING_EXAMPLES,
    MIN_TERM_LENGTH,
    TERM_SUPPORT_RATIO,
)
from expense_classifier.categorization.normalizer import normalize
from expense_classifier.domain.models import Expense

logger = logging.getLogger(__name__)


def group_texts_by_category(expenses: Iterable[Expense]) -> Dict[str, List[str]]:
    """
    Group normalized expense texts by their current category name.

    Expenses without a category, or filed under Miscellaneous, are not
    positive examples of anything and are left out.
    """
    grouped: Dict[str, List[str]] = defaultdict(list)
    for expense in expenses:
        if not expense.category_name or expense.is_miscellaneous:
            continue
        grouped[expense.category_name].append(normalize(expense.text))
    return dict(grouped)


def support_threshold(example_count: int) -> int:
    """Number of examples a word must appear in to be characteristic (30%)"""
    return math.ceil(example_count * TERM_SUPPORT_RATIO)


def extract_frequent_terms(texts: List[str]) -> List[str]:
    """
    Find the words that characterize a category's examples.

    Every occurrence of a word counts, so a word repeated inside one
    example counts more than once. Words must be longer than two
    characters and occur at least 30% as often as there are examples.

    Args:
        texts: Normalized texts of one category's expenses

    Returns:
        Frequent words in first-seen order; empty if fewer than 2 examples
    """
    if len(texts) < MIN_LEARNING_EXAMPLES:
        return []

    frequency: Counter = Counter()
    for text in texts:
        frequency.update(w for w in text.split() if len(w) >= MIN_TERM_LENGTH)

    threshold = support_threshold(len(texts))
    return [word for word, count in frequency.items() if count >= threshold]


class PatternLearner:
    """
    Extracts per-category terms from already categorized expenses.

    Stateless; the suggestion engine merges what it returns into its
    learned-pattern store.

    Example:
        >>> learner = PatternLearner()
        >>> learner.extract(expenses)
        {'Food & Dining': ['restaurant']}
    """

    def extract(self, expenses: Iterable[Expense]) -> Dict[str, List[str]]:
        """
        Extract characteristic terms for every category with enough examples.

        Returns:
            Category name -> frequent terms (categories with none are omitted)
        """
        learned: Dict[str, List[str]] = {}

        for category_name, texts in group_texts_by_category(expenses).items():
            if len(texts) < MIN_LEARNING_EXAMPLES:
                logger.debug(
                    "Skipping '%s': %d example(s), need %d",
                    category_name, len(texts), MIN_LEARNING_EXAMPLES
                )
                continue

            terms = extract_frequent_terms(texts)
            if terms:
                learned[category_name] = terms

        return learned

    def __repr__(self):
        return f"{self.__class__.__name__}()"
