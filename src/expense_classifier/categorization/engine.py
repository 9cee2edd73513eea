import json
import logging
import threading
from contextlib import contextmanager
from typing import Dict, Generator, Iterable, List, Optional

from expense_classifier.categorization.catalog import PatternCatalog
from expense_classifier.categorization.categories import (
    CONFIDENCE_DIVISOR,
    DEFAULT_SUGGESTION_LIMIT,
    HIGH_CONFIDENCE_THRESHOLD,
    LEARNED_PATTERNS_KEY,
    MEDIUM_CONFIDENCE_THRESHOLD,
)
from expense_classifier.categorization.learning import PatternLearner
from expense_classifier.categorization.scorer import ScoreBreakdown, Scorer
from expense_classifier.domain.enums import ConfidenceLabel
from expense_classifier.domain.models import (
    Category,
    Expense,
    ReclassificationCandidate,
    Suggestion,
)
from expense_classifier.repositories.base import LearnedPatternStore, PatternStoreError

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 2


def confidence_from_score(score: float) -> float:
    """Linear normalization of a raw score into [0, 1]"""
    return max(0.0, min(score / CONFIDENCE_DIVISOR, 1.0))


def confidence_label(confidence: float) -> ConfidenceLabel:
    if confidence >= HIGH_CONFIDENCE_THRESHOLD:
        return ConfidenceLabel.HIGH
    if confidence >= MEDIUM_CONFIDENCE_THRESHOLD:
        return ConfidenceLabel.MEDIUM
    return ConfidenceLabel.LOW


class SuggestionEngine:
    """
    Rule-based category suggestion engine.

    Owns the category registry and the mutable learned-pattern store;
    scores text against the catalog plus learned terms.

    One engine is normally created per session and shared by reference.
    A lock guards the learned-pattern store so a background learn() pass
    cannot interleave with suggest() calls.

    Usage:
        # Production - default catalog, learned state from a store
        with engine_session(store, categories) as engine:
            suggestions = engine.suggest("Paid WAPDA bijli bill")

        # Testing - inject a catalog
        engine = SuggestionEngine(categories, catalog=PatternCatalog.from_config(config))
    """

    def __init__(
        self,
        categories: Optional[Iterable[Category]] = None,
        catalog: Optional[PatternCatalog] = None,
        scorer: Optional[Scorer] = None,
        learner: Optional[PatternLearner] = None,
    ):
        self.catalog = catalog if catalog is not None else PatternCatalog.load()
        self.scorer = scorer or Scorer()
        self.learner = learner or PatternLearner()

        self._lock = threading.RLock()
        self._learned: Dict[str, List[str]] = {}

        self._categories: List[Category] = []
        self._by_id: Dict[str, Category] = {}
        self._id_by_name: Dict[str, str] = {}
        self._id_by_lower_name: Dict[str, str] = {}
        self.set_categories(categories or [])

    # ------------------------------------------------------------------
    # Category registry
    # ------------------------------------------------------------------

    def set_categories(self, categories: Iterable[Category]) -> None:
        """Replace the category registry and rebuild both name lookups"""
        categories = list(categories)
        self._categories = categories
        self._by_id = {c.id: c for c in categories}
        self._id_by_name = {c.name: c.id for c in categories}
        self._id_by_lower_name = {c.name.lower(): c.id for c in categories}

    @property
    def categories(self) -> List[Category]:
        return list(self._categories)

    def resolve_category(self, category_name: str) -> Optional[Category]:
        """Find the registered category for a catalog name, or None"""
        category_id = self._id_by_name.get(category_name)
        if category_id is None:
            category_id = self._id_by_lower_name.get(category_name.lower())
        if category_id is None:
            return None
        return self._by_id.get(category_id)

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------

    def suggest(
        self,
        description: Optional[str],
        notes: Optional[str] = "",
        limit: int = DEFAULT_SUGGESTION_LIMIT,
    ) -> List[Suggestion]:
        """
        Rank registered categories for a piece of expense text.

        Args:
            description: Expense description
            notes: Optional notes, appended to the description
            limit: Maximum number of suggestions

        Returns:
            Suggestions, highest score first; ties keep catalog order.
            Empty when the text is shorter than 2 characters or limit < 1.
        """
        if limit < 1:
            return []

        text = f"{description or ''} {notes or ''}".strip()
        if len(text) < MIN_TEXT_LENGTH:
            return []

        scored = []
        with self._lock:
            for pattern in self.catalog:
                score = self.scorer.score(
                    text, pattern, self._learned.get(pattern.category_name, ())
                )
                if score <= 0:
                    continue

                category = self.resolve_category(pattern.category_name)
                if category is None:
                    continue

                scored.append((score, category))

        # sorted() is stable, equal scores stay in catalog order
        scored = sorted(scored, key=lambda item: item[0], reverse=True)

        suggestions = []
        for score, category in scored[:limit]:
            confidence = confidence_from_score(score)
            suggestions.append(Suggestion(
                category_id=category.id,
                category_name=category.name,
                color=category.color,
                confidence=confidence,
                confidence_label=confidence_label(confidence),
            ))
        return suggestions

    def explain(self, description: str, notes: str = "") -> List[ScoreBreakdown]:
        """
        Itemized scores for every catalog category that matched.

        Unlike suggest(), categories missing from the registry are included;
        this is an audit view of the catalog.
        """
        text = f"{description or ''} {notes or ''}".strip()
        with self._lock:
            breakdowns = [
                self.scorer.explain(text, pattern, self._learned.get(pattern.category_name, ()))
                for pattern in self.catalog
            ]
        return sorted(
            (b for b in breakdowns if b.score > 0),
            key=lambda b: b.score,
            reverse=True,
        )

    def suggest_reclassifications(
        self,
        expenses: Iterable[Expense],
        limit: int = DEFAULT_SUGGESTION_LIMIT,
    ) -> List[ReclassificationCandidate]:
        """
        Propose categories for expenses currently filed as Miscellaneous.

        Expenses with no suggestion are dropped. Output keeps input order.
        """
        candidates = []
        for expense in expenses:
            if not expense.is_miscellaneous:
                continue

            suggestions = self.suggest(expense.description, expense.notes, limit=limit)
            if not suggestions:
                continue

            candidates.append(ReclassificationCandidate(expense=expense, suggestions=suggestions))
        return candidates

    # ------------------------------------------------------------------
    # Learning
    # ------------------------------------------------------------------

    def learn(self, expenses: Iterable[Expense]) -> Dict[str, List[str]]:
        """
        Extend learned patterns from already categorized expenses.

        Terms are only ever added. Miscellaneous expenses are ignored.

        Returns:
            Category name -> terms that were not known before this call
        """
        extracted = self.learner.extract(expenses)
        added: Dict[str, List[str]] = {}

        with self._lock:
            for category_name, terms in extracted.items():
                known = self._learned.setdefault(category_name, [])
                new_terms = [t for t in terms if t not in known]
                if new_terms:
                    known.extend(new_terms)
                    added[category_name] = new_terms

        if added:
            logger.info(
                "Learned %d new term(s) across %d categories",
                sum(len(t) for t in added.values()), len(added)
            )
        return added

    @property
    def learned_patterns(self) -> Dict[str, List[str]]:
        """Snapshot copy of the learned-pattern store"""
        with self._lock:
            return {name: list(terms) for name, terms in self._learned.items()}

    def reset_learned_patterns(self) -> None:
        with self._lock:
            self._learned = {}

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def export_learned_patterns(self) -> str:
        """Serialize learned patterns as JSON: {category: [terms]}"""
        with self._lock:
            return json.dumps(self._learned, ensure_ascii=False)

    def import_learned_patterns(self, data: str) -> bool:
        """
        Replace learned patterns with a previously exported JSON blob.

        Never raises: malformed input is logged and the current state kept.

        Returns:
            True if the state was replaced
        """
        try:
            parsed = json.loads(data)
        except (TypeError, ValueError) as e:
            logger.warning("Failed to import learned patterns: %s", e)
            return False

        if not isinstance(parsed, dict) or not all(
            isinstance(name, str)
            and isinstance(terms, list)
            and all(isinstance(t, str) for t in terms)
            for name, terms in parsed.items()
        ):
            logger.warning("Failed to import learned patterns: expected {category: [terms]}")
            return False

        with self._lock:
            self._learned = {
                name: list(dict.fromkeys(terms)) for name, terms in parsed.items()
            }
        return True

    def load(self, store: LearnedPatternStore, key: str = LEARNED_PATTERNS_KEY) -> bool:
        """Load learned patterns from a store; missing or unreadable state is not fatal"""
        try:
            saved = store.get(key)
        except PatternStoreError as e:
            logger.warning("Failed to load learned patterns from %r: %s", store, e)
            return False

        if saved is None:
            return False
        return self.import_learned_patterns(saved)

    def persist(self, store: LearnedPatternStore, key: str = LEARNED_PATTERNS_KEY) -> bool:
        """Write learned patterns to a store; failures are logged, not raised"""
        try:
            store.set(key, self.export_learned_patterns())
        except PatternStoreError as e:
            logger.warning("Failed to persist learned patterns to %r: %s", store, e)
            return False
        return True

    def __repr__(self) -> str:
        return (
            f"SuggestionEngine({len(self.catalog)} catalog categories, "
            f"{len(self._categories)} registered, "
            f"{len(self._learned)} with learned terms)"
        )


@contextmanager
def engine_session(
    store: LearnedPatternStore,
    categories: Optional[Iterable[Category]] = None,
    catalog: Optional[PatternCatalog] = None,
) -> Generator[SuggestionEngine, None, None]:
    """
    Explicit engine lifecycle: load learned state, operate, persist.

    Usage:
        with engine_session(store, categories) as engine:
            engine.learn(expenses)
            candidates = engine.suggest_reclassifications(expenses)
        # learned patterns are written back here, also when the block raises
    """
    engine = SuggestionEngine(categories, catalog=catalog)
    engine.load(store)
    try:
        yield engine
    finally:
        engine.persist(store)
