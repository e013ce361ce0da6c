"""Pick the LOKACIJE row that best fits a location kind."""
from typing import Any, Dict, Iterable, List, Optional

from ..app.preprocess import normalize
from ..data.fields import field

HAYSTACK_FIELDS = ("location_kind", "location_name", "location_address", "location_city", "location_note")
KEYWORD_POINTS = 2
KIND_PREFIX_POINTS = 2


def location_score(row: Dict[str, Any], keywords: Iterable[str]) -> int:
    haystack = normalize(" ".join(field(row, name) for name in HAYSTACK_FIELDS))
    kind = normalize(field(row, "location_kind"))
    score = 0
    for keyword in keywords:
        kw = normalize(keyword)
        if not kw:
            continue
        if kw in haystack:
            score += KEYWORD_POINTS
        if kind.startswith(kw):
            score += KIND_PREFIX_POINTS
    return score


def find_best_location(rows: Optional[List[Dict[str, Any]]], keywords: Iterable[str]) -> Optional[Dict[str, Any]]:
    """Highest scoring row, or None when nothing scores. Equal scores keep the earlier row."""
    keywords = list(keywords)
    best, best_score = None, 0
    for row in rows or []:
        score = location_score(row, keywords)
        if score > best_score:
            best, best_score = row, score
    return best
