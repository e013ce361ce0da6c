#!/usr/bin/env python3
"""
Preprocessing module for the driving-school chatbot.

This module handles text normalization, category code detection and the
bag-of-words overlap score shared by the FAQ and location matchers.
"""

import re
import unicodedata
from typing import Any, NamedTuple, Set

from ..data.fields import as_text

_COMBINING = re.compile(r"[\u0300-\u036f]")
_DISALLOWED = re.compile(r"[^a-z0-9ćčđšž\s]")
_SPACES = re.compile(r"\s+")

# Longer and multi-word codes first so that "A2" never resolves to "A".
CATEGORY_CODES = ("KOD 95", "KOD 96", "AM", "A1", "A2", "BE", "CE", "A", "B", "C", "D", "F", "G")
_CATEGORY_PATTERNS = [
    (code, re.compile(r"\b" + code.replace(" ", r"\s*") + r"\b"))
    for code in CATEGORY_CODES
]
_CATEGORY_ALT = "|".join(code.replace(" ", r"\s*").lower() for code in CATEGORY_CODES)
_EXPLICIT_CATEGORY = re.compile(
    r"\bkategorij\w*\s+(" + _CATEGORY_ALT + r")\b|\b(" + _CATEGORY_ALT + r")\s+kategorij\w*"
)


def normalize(text: Any) -> str:
    """
    Normalize user or record text for matching.

    Args:
        text: Any cell value or message

    Returns:
        Lower-cased text without diacritics or punctuation, single-spaced
    """
    s = as_text(text).lower()
    s = _COMBINING.sub("", unicodedata.normalize("NFD", s))
    s = _DISALLOWED.sub(" ", s)
    return _SPACES.sub(" ", s).strip()


def normalize_slug(value: Any) -> str:
    return as_text(value).strip().lower()


def normalize_category(raw: Any) -> str:
    """
    Map a free-text category label to a known licence code.

    Args:
        raw: Label such as "Kategorija B" or "kod 96"

    Returns:
        One of CATEGORY_CODES, or "" when no code is recognised
    """
    text = normalize(raw).upper()
    if not text:
        return ""
    for code, pattern in _CATEGORY_PATTERNS:
        if pattern.search(text):
            return code
    return ""


def detect_category(message: Any) -> str:
    """Category the user asks about; "kategorija X" beats a stray letter."""
    text = normalize(message)
    match = _EXPLICIT_CATEGORY.search(text)
    if match:
        return normalize_category(match.group(1) or match.group(2))
    return normalize_category(text)


def word_set(text: Any) -> Set[str]:
    return {w for w in normalize(text).split(" ") if len(w) >= 3}


class OverlapScore(NamedTuple):
    overlap: int
    query_size: int
    candidate_size: int
    jaccard: float


def overlap_score(query: Any, candidate: Any) -> OverlapScore:
    """Shared-word count and Jaccard similarity of two texts."""
    qs = word_set(query)
    cs = word_set(candidate)
    overlap = len(qs & cs)
    denominator = max(1, len(qs) + len(cs) - overlap)
    return OverlapScore(overlap, len(qs), len(cs), overlap / denominator)


def category_matches(raw: Any, code: str) -> bool:
    """True when the label lists the given code, e.g. "B, BE" lists "B"."""
    if not code:
        return True
    pattern = r"\b" + re.escape(code).replace(r"\ ", r"\s*") + r"\b"
    return re.search(pattern, normalize(raw).upper()) is not None
