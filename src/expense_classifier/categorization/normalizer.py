import re
from typing import Any, List

# Anything that is not a letter, digit or whitespace (underscore counts as punctuation)
_NON_WORD = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: Any) -> str:
    """
    Canonicalize free text for keyword matching.

    Lowercases, replaces punctuation with spaces, collapses whitespace
    and trims. Never raises; None or empty input gives "".

    Example:
        >>> normalize("  Paid ELECTRICITY-bill (March)! ")
        'paid electricity bill march'
    """
    if not text:
        return ""

    if not isinstance(text, str):
        text = str(text)

    text = text.lower()
    text = _NON_WORD.sub(" ", text)
    text = _WHITESPACE.sub(" ", text)
    return text.strip()


def tokenize(text: Any) -> List[str]:
    """Normalize text and split it into words"""
    return normalize(text).split()
