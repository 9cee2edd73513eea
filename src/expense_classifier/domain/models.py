from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from expense_classifier.domain.enums import ConfidenceLabel

MISCELLANEOUS = "Miscellaneous"


@dataclass
class Category:
    """A category as supplied by the category registry"""
    id: str
    name: str
    color: str = ""


@dataclass
class Expense:
    """Core domain model for the parts of an expense relevant to matching"""
    id: Optional[str]
    description: str
    notes: str = ""
    amount: Optional[Decimal] = None
    expense_date: Optional[date] = None
    category_name: Optional[str] = None

    @property
    def text(self) -> str:
        """Description and notes joined the way they are scored"""
        return f"{self.description or ''} {self.notes or ''}".strip()

    @property
    def is_miscellaneous(self) -> bool:
        return (self.category_name or "").lower() == MISCELLANEOUS.lower()

    def __repr__(self):
        return f"Expense({self.id}, {(self.description or '')[:30]}, {self.category_name})"


@dataclass(frozen=True)
class Suggestion:
    """A ranked category suggestion for a piece of expense text"""
    category_id: str
    category_name: str
    color: str
    confidence: float
    confidence_label: ConfidenceLabel

    @property
    def auto_accept(self) -> bool:
        """Whether the suggestion may be applied without human confirmation"""
        from expense_classifier.categorization.categories import AUTO_ACCEPT_THRESHOLD
        return self.confidence >= AUTO_ACCEPT_THRESHOLD

    def to_dict(self) -> dict:
        return {
            "categoryId": self.category_id,
            "categoryName": self.category_name,
            "color": self.color,
            "confidence": self.confidence,
            "confidenceLabel": self.confidence_label.value,
        }


@dataclass
class ReclassificationCandidate:
    """
    One Miscellaneous expense paired with its ranked suggestions.

    `selected_category_id` starts at the top suggestion and may be changed
    by the reviewer before the candidate is applied.
    """
    expense: Expense
    suggestions: List[Suggestion] = field(default_factory=list)
    selected_category_id: Optional[str] = None

    def __post_init__(self):
        if self.selected_category_id is None and self.top_suggestion:
            self.selected_category_id = self.top_suggestion.category_id

    @property
    def top_suggestion(self) -> Optional[Suggestion]:
        return self.suggestions[0] if self.suggestions else None

    @property
    def auto_accept(self) -> bool:
        return self.top_suggestion is not None and self.top_suggestion.auto_accept
