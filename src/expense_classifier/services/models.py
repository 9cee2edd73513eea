"""
Service layer models - DTOs for reclassification operations.

These models represent the results of service operations, not domain entities.
"""
from dataclasses import dataclass, field
from typing import Dict, List

from expense_classifier.categorization.categories import (
    AUTO_ACCEPT_THRESHOLD,
    REVIEW_CONFIDENCE_THRESHOLD,
)
from expense_classifier.domain.models import ReclassificationCandidate


@dataclass
class ReclassificationSummary:
    """
    Candidates for a batch of expenses plus their confidence breakdown.

    Bands are on the top suggestion's confidence:
    - auto-accept: >= 0.5, applied without confirmation
    - review: 0.3 to 0.5, needs a human to confirm
    - weak: < 0.3
    """
    processed_count: int
    candidates: List[ReclassificationCandidate] = field(default_factory=list)
    learned_terms: Dict[str, List[str]] = field(default_factory=dict)

    def _top_confidences(self) -> List[float]:
        return [c.top_suggestion.confidence for c in self.candidates if c.top_suggestion]

    @property
    def auto_accept_count(self) -> int:
        return sum(1 for c in self._top_confidences() if c >= AUTO_ACCEPT_THRESHOLD)

    @property
    def review_count(self) -> int:
        return sum(
            1 for c in self._top_confidences()
            if REVIEW_CONFIDENCE_THRESHOLD <= c < AUTO_ACCEPT_THRESHOLD
        )

    @property
    def weak_count(self) -> int:
        return sum(1 for c in self._top_confidences() if c < REVIEW_CONFIDENCE_THRESHOLD)

    @property
    def average_confidence(self) -> float:
        confidences = self._top_confidences()
        if not confidences:
            return 0.0
        return sum(confidences) / len(confidences)

    def __str__(self) -> str:
        "Human-readable summary"
        lines = [
            f"Reclassification summary:",
            f" 📄 Miscellaneous expenses processed: {self.processed_count}",
            f" 💡 With suggestions: {len(self.candidates)}",
            f" ✅ Auto-accept: {self.auto_accept_count}",
            f" 👀 Needs review: {self.review_count}",
            f" ⚠️ Weak: {self.weak_count}",
        ]
        return "\n".join(lines)


@dataclass
class ApplyResult:
    """
    Result of applying reclassification candidates.

    `applied` holds candidates whose update succeeded (or would have,
    in a dry run); `failed` maps expense id to the error message.
    """
    applied: List[ReclassificationCandidate] = field(default_factory=list)
    skipped: List[ReclassificationCandidate] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    dry_run: bool = False

    @property
    def applied_count(self) -> int:
        return len(self.applied)

    @property
    def success(self) -> bool:
        """At least one update went through and none failed"""
        return self.applied_count > 0 and not self.failed

    def __str__(self) -> str:
        lines = [
            f"{'Would apply' if self.dry_run else 'Applied'}: {self.applied_count}",
            f" ⏭️ Skipped (below threshold or no selection): {len(self.skipped)}",
        ]
        if self.failed:
            lines.append(f" ❌ Failed: {len(self.failed)}")
        return "\n".join(lines)
