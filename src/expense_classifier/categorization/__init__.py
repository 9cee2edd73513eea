"""
Category suggestion system for institutional expenses.

Scores free-text expense descriptions against a keyword catalog, learns
extra per-category terms from categorized history, and proposes new
categories for expenses filed under Miscellaneous.

Quick Start:
    >>> from expense_classifier.categorization import SuggestionEngine
    >>>
    >>> engine = SuggestionEngine(categories)
    >>> engine.learn(expenses)
    >>> for suggestion in engine.suggest("WAPDA bijli bill March"):
    ...     print(suggestion.category_name, suggestion.confidence_label.value)
"""
from expense_classifier.categorization.engine import SuggestionEngine, engine_session
from expense_classifier.categorization.catalog import CatalogError, CategoryPattern, PatternCatalog
from expense_classifier.categorization.scorer import Scorer, ScoreBreakdown
from expense_classifier.categorization.learning import PatternLearner
from expense_classifier.categorization.normalizer import normalize
from expense_classifier.categorization.adapters import category_from_record, expense_from_record
from expense_classifier.categorization import categories

__all__ = [
    "SuggestionEngine",
    "engine_session",
    "CatalogError",
    "CategoryPattern",
    "PatternCatalog",
    "Scorer",
    "ScoreBreakdown",
    "PatternLearner",
    "normalize",
    "category_from_record",
    "expense_from_record",
    "categories",
]
