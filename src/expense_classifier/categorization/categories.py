"""
Category names and calibration constants shared by the scorer, the
suggestion engine and the reclassification workflow.
"""
from expense_classifier.domain.models import MISCELLANEOUS

# Scoring factors, multiplied by the category weight
PHRASE_MATCH_FACTOR = 3
WORD_MATCH_FACTOR = 2
LEARNED_MATCH_FACTOR = 2
MULTI_MATCH_BONUS = 0.1

# Raw score -> confidence
CONFIDENCE_DIVISOR = 10

HIGH_CONFIDENCE_THRESHOLD = 0.8
MEDIUM_CONFIDENCE_THRESHOLD = 0.5

# A Medium suggestion is exactly what may be applied without confirmation
AUTO_ACCEPT_THRESHOLD = MEDIUM_CONFIDENCE_THRESHOLD
REVIEW_CONFIDENCE_THRESHOLD = 0.3

# Learning
MIN_LEARNING_EXAMPLES = 2
MIN_TERM_LENGTH = 3
TERM_SUPPORT_RATIO = 0.3

DEFAULT_SUGGESTION_LIMIT = 3

LEARNED_PATTERNS_KEY = "expense_tracker_learned_patterns"

__all__ = [
    "MISCELLANEOUS",
    "PHRASE_MATCH_FACTOR",
    "WORD_MATCH_FACTOR",
    "LEARNED_MATCH_FACTOR",
    "MULTI_MATCH_BONUS",
    "CONFIDENCE_DIVISOR",
    "HIGH_CONFIDENCE_THRESHOLD",
    "MEDIUM_CONFIDENCE_THRESHOLD",
    "AUTO_ACCEPT_THRESHOLD",
    "REVIEW_CONFIDENCE_THRESHOLD",
    "MIN_LEARNING_EXAMPLES",
    "MIN_TERM_LENGTH",
    "TERM_SUPPORT_RATIO",
    "DEFAULT_SUGGESTION_LIMIT",
    "LEARNED_PATTERNS_KEY",
]
