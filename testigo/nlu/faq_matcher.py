"""Strict FAQ lookup: answer straight from the FAQ table when a curated question clearly matches.

Precision over recall. A miss only means the question goes to the model; a
wrong canned answer is what the thresholds below guard against.
"""
import re
from typing import Any, Dict, List, Optional

from ..app.preprocess import normalize, normalize_slug, overlap_score
from ..data.fields import as_text, field, raw_field
from ..utils.logger import get_logger

logger = get_logger("faq")

MIN_QUERY_WORDS = 4
MIN_QUERY_CHARS = 12
MIN_EXACT_CHARS = 10

_SPLIT = re.compile(r"\r?\n|\||,")
_FALSE_VALUES = {"false", "ne", "no", "0", "neaktivno"}
GLOBAL_SCOPE_SLUGS = {"", "global", "globalno", "sve"}


def is_active(row: Dict[str, Any]) -> bool:
    value = raw_field(row, "faq_active")
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    return as_text(value).strip().lower() not in _FALSE_VALUES


def split_phrases(value: Any) -> List[str]:
    return [part.strip() for part in _SPLIT.split(as_text(value)) if part.strip()]


def candidate_phrases(row: Dict[str, Any]) -> List[str]:
    phrases: List[str] = []
    for name in ("faq_question", "faq_examples", "faq_keywords"):
        phrases.extend(split_phrases(field(row, name)))
    return phrases


def filter_faq_scope(rows: List[Dict[str, Any]], slug: str, scope: str = "global") -> List[Dict[str, Any]]:
    """`global`: every row; `tenant`: rows of this school plus rows marked global."""
    if scope != "tenant":
        return list(rows)
    wanted = normalize_slug(slug)
    return [r for r in rows if normalize_slug(field(r, "slug")) in GLOBAL_SCOPE_SLUGS | {wanted}]


def match_faq(message: str, rows: Optional[List[Dict[str, Any]]]) -> str:
    """
    Best FAQ answer for the message, or "".

    Args:
        message: Raw user message
        rows: FAQ table rows

    Returns:
        Answer text of the best qualifying record
    """
    if not rows:
        return ""
    q = normalize(message)
    if len(q.split()) < MIN_QUERY_WORDS or len(q) < MIN_QUERY_CHARS:
        return ""

    best = None
    best_phrase = ""
    best_answer = ""
    for row in rows:
        if not is_active(row):
            continue
        answer = field(row, "faq_answer")
        if not answer:
            continue
        for candidate in candidate_phrases(row):
            cn = normalize(candidate)
            if not cn:
                continue
            almost_exact = (cn in q or q in cn) and min(len(q), len(cn)) >= MIN_EXACT_CHARS
            score = overlap_score(message, candidate)
            good = (
                almost_exact
                or (score.overlap >= 3 and score.jaccard >= 0.4)
                or (score.overlap >= 2 and score.jaccard >= 0.25 and score.query_size <= 6)
            )
            if not good:
                continue
            rank = (score.overlap, score.jaccard)
            if best is None or rank > best:
                best = rank
                best_answer = answer
                best_phrase = candidate
    if best is not None:
        logger.debug(f"[FAQ] matched '{best_phrase}' overlap={best[0]} jaccard={best[1]:.2f}")
    return best_answer
