from typing import Dict, Optional

from expense_classifier.repositories.base import LearnedPatternStore


class InMemoryPatternStore(LearnedPatternStore):
    """Dict-backed store for tests and one-shot runs"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def __repr__(self) -> str:
        return f"InMemoryPatternStore({len(self._data)} keys)"
