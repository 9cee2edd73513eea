import pytest

from expense_classifier.categorization.catalog import CategoryPattern, PatternCatalog
from expense_classifier.categorization.scorer import LEARNED, PHRASE, WORDS, Scorer


@pytest.fixture
def scorer() -> Scorer:
    return Scorer()


@pytest.mark.unit
class TestScorerMatching:
    """Test the phrase, sub-word and learned-term branches"""

    def test_phrase_match_scores_three_times_weight(self, scorer: Scorer, catalog: PatternCatalog):
        # Act
        score = scorer.score("Paid electricity bill for March", catalog.get("Utilities"))

        # Assert
        assert score == pytest.approx(3.6)

    def test_multi_word_keyword_matches_out_of_order(self, scorer: Scorer, catalog: PatternCatalog):
        """'attendance register' matches 'register attendance sheet' through the sub-word fallback"""
        breakdown = scorer.explain("register attendance sheet", catalog.get("Office Supplies"))

        assert breakdown.score == pytest.approx(2.0)
        assert [(m.keyword, m.kind) for m in breakdown.matches] == [("attendance register", WORDS)]

    def test_sub_word_fallback_accepts_partial_words(self, scorer: Scorer):
        pattern = CategoryPattern("Utilities", ("electric bill",), 1.0)

        # "electricity" contains "electric"
        assert scorer.score("electricity bills", pattern) == pytest.approx(2.0)

    def test_single_word_keyword_gets_no_partial_credit(self, scorer: Scorer, catalog: PatternCatalog):
        """'station' is inside 'stationery' but single-word keywords need a substring hit"""
        assert scorer.score("station visit", catalog.get("Office Supplies")) == 0

    def test_no_match_scores_zero(self, scorer: Scorer, catalog: PatternCatalog):
        assert scorer.score("something unrelated", catalog.get("Security")) == 0

    @pytest.mark.parametrize("text", ["", None, "!!", "   "])
    def test_empty_text_scores_zero(self, scorer: Scorer, catalog: PatternCatalog, text):
        for pattern in catalog:
            assert scorer.score(text, pattern) == 0

    def test_repeated_keyword_counts_once(self, scorer: Scorer, catalog: PatternCatalog):
        pattern = catalog.get("Security")

        assert scorer.score("guard guard guard", pattern) == scorer.score("guard", pattern)

    def test_learned_term_scores_two_times_weight(self, scorer: Scorer, catalog: PatternCatalog):
        breakdown = scorer.explain("restaurant invoice", catalog.get("Food & Dining"), ["restaurant"])

        assert breakdown.score == pytest.approx(1.8)
        assert breakdown.matches[0].kind == LEARNED


@pytest.mark.unit
class TestScorerBonus:
    """Test the multi-cue multiplier"""

    def test_single_match_has_no_bonus(self, scorer: Scorer, catalog: PatternCatalog):
        breakdown = scorer.explain("wapda", catalog.get("Utilities"))

        assert breakdown.match_count == 1
        assert breakdown.multiplier == 1.0

    def test_two_matches_apply_linear_bonus(self, scorer: Scorer, catalog: PatternCatalog):
        # Act
        breakdown = scorer.explain("wapda electricity bill", catalog.get("Utilities"))

        # Assert - (3.6 + 3.6) * 1.2
        assert [m.kind for m in breakdown.matches] == [PHRASE, PHRASE]
        assert breakdown.multiplier == pytest.approx(1.2)
        assert breakdown.score == pytest.approx(8.64)

    def test_bonus_is_per_category(self, scorer: Scorer, catalog: PatternCatalog):
        """Each category's bonus depends only on its own match count"""
        text = "wapda electricity bill and lunch"

        utilities = scorer.explain(text, catalog.get("Utilities"))
        food = scorer.explain(text, catalog.get("Food & Dining"))

        assert utilities.multiplier == pytest.approx(1.2)
        assert food.multiplier == 1.0
        assert food.score == pytest.approx(2.7)

    def test_learned_terms_count_towards_bonus(self, scorer: Scorer, catalog: PatternCatalog):
        score = scorer.score("lunch at restaurant", catalog.get("Food & Dining"), ["restaurant"])

        # (2.7 + 1.8) * 1.2
        assert score == pytest.approx(5.4)

    def test_adding_learned_term_never_lowers_score(self, scorer: Scorer, catalog: PatternCatalog):
        pattern = catalog.get("Food & Dining")
        text = "lunch at restaurant"

        without = scorer.score(text, pattern)
        with_term = scorer.score(text, pattern, ["restaurant"])
        with_unrelated = scorer.score(text, pattern, ["bakery"])

        assert with_term >= without
        assert with_unrelated == without

    def test_score_matches_explain_total(self, scorer: Scorer, catalog: PatternCatalog):
        text = "Printer ink and stationery for attendance register"
        pattern = catalog.get("Office Supplies")

        assert scorer.score(text, pattern) == scorer.explain(text, pattern).score
