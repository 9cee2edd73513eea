import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from expense_classifier.categorization.normalizer import normalize
from expense_classifier.config.settings import ConfigLoader

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when the keyword catalog cannot be loaded or is malformed."""
    pass


@dataclass(frozen=True)
class CategoryPattern:
    """
    Hand-curated keyword rule set for one category.

    Keyed by category *name*, not ID, so the catalog stays independent
    of the live category table.
    """
    category_name: str
    keywords: tuple
    weight: float = 1.0

    def __post_init__(self):
        if not self.category_name:
            raise ValueError("CategoryPattern requires a category name")
        if self.weight <= 0:
            raise ValueError(
                f"Weight for '{self.category_name}' must be positive, got {self.weight}"
            )
        # Dedupe while keeping catalog order
        object.__setattr__(self, "keywords", tuple(dict.fromkeys(self.keywords)))

    @property
    def normalized_keywords(self) -> List[str]:
        return [kw for kw in (normalize(k) for k in self.keywords) if kw]

    def __repr__(self):
        return f"CategoryPattern('{self.category_name}', {len(self.keywords)} keywords, weight={self.weight})"


class PatternCatalog:
    """
    Read-only, ordered table of category name -> CategoryPattern.

    Iteration order is the order categories appear in the config and is
    the tie-break order for equal scores.

    Usage:
        # Production - loads patterns.json through ConfigLoader
        catalog = PatternCatalog.load()

        # Testing - inject a config dict
        catalog = PatternCatalog.from_config({"categories": {...}})
    """

    def __init__(self, patterns: List[CategoryPattern], version: Optional[int] = None):
        self._patterns: Dict[str, CategoryPattern] = {}
        for pattern in patterns:
            if pattern.category_name in self._patterns:
                raise CatalogError(f"Duplicate catalog category '{pattern.category_name}'")
            self._patterns[pattern.category_name] = pattern
        self.version = version

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "PatternCatalog":
        """
        Build a catalog from a parsed config dictionary.

        Config format:
            {
                "version": 1,
                "categories": {
                    "Utilities": {"weight": 1.2, "keywords": ["electricity", ...]}
                }
            }

        Raises:
            CatalogError: If the config shape is invalid
        """
        categories = config.get("categories")
        if not isinstance(categories, dict):
            raise CatalogError("Catalog config must contain a 'categories' mapping")

        patterns = []
        for name, definition in categories.items():
            try:
                patterns.append(CategoryPattern(
                    category_name=name,
                    keywords=tuple(definition.get("keywords", [])),
                    weight=float(definition.get("weight", 1.0)),
                ))
            except (AttributeError, TypeError, ValueError) as e:
                raise CatalogError(f"Invalid catalog entry '{name}': {e}") from e

        return cls(patterns, version=config.get("version"))

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "PatternCatalog":
        """
        Load the catalog from a JSON file, or from ConfigLoader if no path is given.

        Raises:
            CatalogError: If the file is missing or not valid JSON
        """
        try:
            if path is None:
                config = ConfigLoader.load_patterns_config()
            else:
                with open(path, encoding="utf-8") as f:
                    config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogError(f"Could not load pattern catalog: {e}") from e

        catalog = cls.from_config(config)
        logger.debug("Loaded pattern catalog v%s with %d categories", catalog.version, len(catalog))
        return catalog

    def get(self, category_name: str) -> Optional[CategoryPattern]:
        return self._patterns.get(category_name)

    @property
    def category_names(self) -> List[str]:
        return list(self._patterns)

    def __iter__(self) -> Iterator[CategoryPattern]:
        return iter(self._patterns.values())

    def __contains__(self, category_name: str) -> bool:
        return category_name in self._patterns

    def __len__(self) -> int:
        return len(self._patterns)

    def __repr__(self) -> str:
        return f"PatternCatalog({len(self)} categories)"
