import logging
from typing import Iterable, List, Optional

from expense_classifier.categorization.categories import (
    AUTO_ACCEPT_THRESHOLD,
    DEFAULT_SUGGESTION_LIMIT,
)
from expense_classifier.categorization.engine import SuggestionEngine
from expense_classifier.domain.models import Expense, ReclassificationCandidate
from expense_classifier.repositories.base import (
    ExpenseCategoryUpdater,
    ExpenseUpdateError,
    LearnedPatternStore,
)
from expense_classifier.services.models import ApplyResult, ReclassificationSummary

logger = logging.getLogger(__name__)


class ReclassificationService:
    """
    Batch workflow for moving expenses out of Miscellaneous.

    Typical flow:
        summary = service.prepare(all_expenses)     # learn, persist, suggest
        # reviewer adjusts candidate.selected_category_id where needed
        result = service.apply(summary.candidates, updater)
    """

    def __init__(
        self,
        engine: SuggestionEngine,
        store: Optional[LearnedPatternStore] = None,
    ):
        self.engine = engine
        self.store = store

    def suggest_reclassifications(
        self,
        expenses: Iterable[Expense],
        limit: int = DEFAULT_SUGGESTION_LIMIT,
    ) -> List[ReclassificationCandidate]:
        """Candidates for the Miscellaneous expenses, in input order"""
        return self.engine.suggest_reclassifications(expenses, limit=limit)

    def prepare(
        self,
        expenses: Iterable[Expense],
        limit: int = DEFAULT_SUGGESTION_LIMIT,
    ) -> ReclassificationSummary:
        """
        Learn from the categorized expenses, persist, then suggest.

        Args:
            expenses: The full expense list, Miscellaneous and otherwise
            limit: Suggestions per candidate

        Returns:
            Summary with candidates and the terms learned on this run
        """
        expenses = list(expenses)
        categorized = [e for e in expenses if not e.is_miscellaneous]
        miscellaneous = [e for e in expenses if e.is_miscellaneous]

        learned = self.engine.learn(categorized)

        if self.store is not None:
            self.engine.persist(self.store)

        candidates = self.engine.suggest_reclassifications(miscellaneous, limit=limit)

        logger.info(
            "%d of %d Miscellaneous expenses have suggestions",
            len(candidates), len(miscellaneous)
        )

        return ReclassificationSummary(
            processed_count=len(miscellaneous),
            candidates=candidates,
            learned_terms=learned,
        )

    def apply(
        self,
        candidates: Iterable[ReclassificationCandidate],
        updater: ExpenseCategoryUpdater,
        min_confidence: float = AUTO_ACCEPT_THRESHOLD,
        dry_run: bool = False,
    ) -> ApplyResult:
        """
        Issue one category update per accepted candidate.

        A candidate is accepted when its top confidence reaches
        min_confidence and it has a selected category. A failed update
        is recorded and the batch continues.

        Args:
            candidates: Candidates to consider
            updater: Receives the category updates
            min_confidence: Cutoff on the top suggestion's confidence
            dry_run: Select without calling the updater

        Returns:
            An ApplyResult
        """
        result = ApplyResult(dry_run=dry_run)

        for candidate in candidates:
            top = candidate.top_suggestion
            if top is None or top.confidence < min_confidence or not candidate.selected_category_id:
                result.skipped.append(candidate)
                continue

            if dry_run:
                result.applied.append(candidate)
                continue

            expense_id = candidate.expense.id
            try:
                updater.update_category(expense_id, candidate.selected_category_id)
            except ExpenseUpdateError as e:
                logger.warning("Failed to update expense %s: %s", expense_id, e)
                result.failed[str(expense_id)] = str(e)
                continue

            result.applied.append(candidate)

        logger.info(
            "%s %d reclassification(s), %d skipped, %d failed",
            "Would apply" if dry_run else "Applied",
            result.applied_count, len(result.skipped), len(result.failed)
        )
        return result
