from dataclasses import dataclass, field
from typing import Iterable, List

from expense_classifier.categorization.catalog import CategoryPattern
from expense_classifier.categorization.categories import (
    LEARNED_MATCH_FACTOR,
    MULTI_MATCH_BONUS,
    PHRASE_MATCH_FACTOR,
    WORD_MATCH_FACTOR,
)
from expense_classifier.categorization.normalizer import normalize


PHRASE = "phrase"
WORDS = "words"
LEARNED = "learned"


@dataclass(frozen=True)
class KeywordMatch:
    """A single keyword or learned term that contributed to a score"""
    keyword: str
    kind: str
    points: float


@dataclass
class ScoreBreakdown:
    """Itemized result of scoring one text against one category"""
    category_name: str
    matches: List[KeywordMatch] = field(default_factory=list)

    @property
    def match_count(self) -> int:
        return len(self.matches)

    @property
    def base_score(self) -> float:
        return sum(m.points for m in self.matches)

    @property
    def multiplier(self) -> float:
        """Corroboration bonus, only when more than one pattern contributed"""
        if self.match_count > 1:
            return 1 + MULTI_MATCH_BONUS * self.match_count
        return 1.0

    @property
    def score(self) -> float:
        return self.base_score * self.multiplier


class Scorer:
    """
    Keyword-weighted scorer for a single category.

    Rules, per catalog keyword:
    - keyword found as a substring of the text -> 3 x weight
    - otherwise, a multi-word keyword whose every sub-word contains or is
      contained by some word of the text -> 2 x weight
    - single-word keywords get no partial credit ("car" must not match "care"
      through the word fallback)

    Each learned term found as a substring adds 2 x weight. If more than one
    keyword or term contributed, the total is multiplied by 1 + 0.1 x matches.

    Example:
        >>> scorer = Scorer()
        >>> pattern = CategoryPattern("Utilities", ("electricity bill",), 1.2)
        >>> round(scorer.score("Paid electricity bill for March", pattern), 2)
        3.6
    """

    def score(
        self,
        text: str,
        pattern: CategoryPattern,
        learned_terms: Iterable[str] = (),
    ) -> float:
        """
        Compute the raw, non-negative score of text for a category.

        Args:
            text: Free text (normalized internally)
            pattern: The category's catalog pattern
            learned_terms: Terms learned for the category

        Returns:
            Raw score; 0.0 when nothing matched
        """
        return self.explain(text, pattern, learned_terms).score

    def explain(
        self,
        text: str,
        pattern: CategoryPattern,
        learned_terms: Iterable[str] = (),
    ) -> ScoreBreakdown:
        """Score text and return which keywords matched and how"""
        normalized_text = normalize(text)
        words = normalized_text.split()
        breakdown = ScoreBreakdown(pattern.category_name)

        if not normalized_text:
            return breakdown

        for keyword in pattern.normalized_keywords:
            if keyword in normalized_text:
                breakdown.matches.append(
                    KeywordMatch(keyword, PHRASE, PHRASE_MATCH_FACTOR * pattern.weight)
                )
            elif self._sub_words_match(keyword, words):
                breakdown.matches.append(
                    KeywordMatch(keyword, WORDS, WORD_MATCH_FACTOR * pattern.weight)
                )

        for term in learned_terms:
            normalized_term = normalize(term)
            if normalized_term and normalized_term in normalized_text:
                breakdown.matches.append(
                    KeywordMatch(normalized_term, LEARNED, LEARNED_MATCH_FACTOR * pattern.weight)
                )

        return breakdown

    @staticmethod
    def _sub_words_match(keyword: str, words: List[str]) -> bool:
        """Bag-of-sub-words fallback, multi-word keywords only"""
        sub_words = keyword.split()
        if len(sub_words) < 2:
            return False

        return all(
            any(word in sub_word or sub_word in word for word in words)
            for sub_word in sub_words
        )

    def __repr__(self):
        return f"{self.__class__.__name__}()"
