"""Category agents: the "everything about category X" summary and its smaller siblings."""
import re
from typing import Any, Dict, List, Optional

from .base_agent import BaseAgent, Data, FactQuery
from ..app.preprocess import normalize, normalize_category
from ..data.fields import field
from ..data.formatters import convert_to_euro, monthly_rate, payment_terms_text
from ..nlu.rules import CATEGORY_SUMMARY, ENROLLMENT, HOURS, MINIMUM_AGE, contains_any

_EXTRA_HOUR = re.compile(r"dodatn\w*\s+sat")


def rows_for_category(rows: Optional[List[Dict[str, Any]]], code: str, key: str = "category") -> List[Dict[str, Any]]:
    return [r for r in rows or [] if normalize_category(field(r, key)) == code]


def category_row(data: Data, code: str) -> Optional[Dict[str, Any]]:
    rows = rows_for_category(data.get("kategorije"), code)
    return rows[0] if rows else None


def hours_section(row: Optional[Dict[str, Any]]) -> str:
    if not row:
        return ""
    theory = field(row, "theory_hours", "?")
    practice = field(row, "practice_hours", "?")
    text = f"• Sati: Teorija {theory}h, Praksa {practice}h"
    duration = field(row, "duration")
    if duration:
        text += f" | Trajanje (tipično): {duration}"
    minimum_age = field(row, "minimum_age")
    if minimum_age:
        text += f"\n• Minimalna dob: {minimum_age} godina"
    conditions = field(row, "enrollment_conditions")
    if conditions:
        text += f"\n• Uvjeti upisa: {conditions}"
    return text


def price_section(data: Data, code: str) -> str:
    lines = []
    for row in rows_for_category(data.get("cjenik"), code):
        variant = field(row, "price_variant", "Paket")
        raw = field(row, "price")
        line = f"  - {variant}: {convert_to_euro(raw) or '—'} ({monthly_rate(raw)})"
        note = field(row, "note")
        if note:
            line += f" — {note}"
        lines.append(line)
    return "• Cijene:\n" + "\n".join(lines) if lines else ""


def fee_section(data: Data, code: str) -> str:
    lines = [
        f"  - {field(row, 'fee_name', 'Naknada')}: {convert_to_euro(field(row, 'fee_amount'))}"
        for row in rows_for_category(data.get("hak"), code)
    ]
    return "• Ispitne naknade (HAK):\n" + "\n".join(lines) if lines else ""


def payment_section(data: Data) -> str:
    terms = payment_terms_text(data.get("uvjeti") or [])
    return f"• Uvjeti plaćanja: {terms}" if terms else ""


def extra_hour_section(data: Data, code: str) -> str:
    lines = [
        f"  - Dodatni sat ({code}): {convert_to_euro(field(row, 'service_price'))}"
        for row in rows_for_category(data.get("dodatne"), code)
        if _EXTRA_HOUR.search(normalize(field(row, "service_name")))
    ]
    return "• Dodatni sat:\n" + "\n".join(lines) if lines else ""


def build_category_summary(raw_category: Any, data: Data) -> str:
    """
    Everything the tables know about one category, in a fixed order.

    Args:
        raw_category: Category label, any case ("b", "Kategorija B")
        data: Table rows keyed by logical table name

    Returns:
        Header plus non-empty sections, or "" when no section has data
    """
    code = normalize_category(raw_category)
    if not code:
        return ""
    hours = hours_section(category_row(data, code))
    prices = price_section(data, code)
    fees = fee_section(data, code)
    extra = extra_hour_section(data, code)
    # payment terms alone say nothing about the category
    if not (hours or prices or fees or extra):
        return ""
    sections = [hours, prices, fees, payment_section(data), extra]
    return "\n".join([f"✅ KATEGORIJA {code}"] + [s for s in sections if s])


class CategorySummaryAgent(BaseAgent):
    name = "category_summary"

    def matches(self, query: FactQuery) -> bool:
        return bool(query.category) and contains_any(query.text, CATEGORY_SUMMARY)

    def handle(self, query: FactQuery, data: Data, school: Dict[str, Any]) -> str:
        return build_category_summary(query.category, data)


class MinimumAgeAgent(BaseAgent):
    name = "minimum_age"

    def matches(self, query: FactQuery) -> bool:
        return bool(query.category) and contains_any(query.text, MINIMUM_AGE)

    def handle(self, query: FactQuery, data: Data, school: Dict[str, Any]) -> str:
        age = field(category_row(data, query.category), "minimum_age")
        return f"MINIMALNA DOB ZA {query.category}:\n• {age} godina" if age else ""


class EnrollmentAgent(BaseAgent):
    name = "enrollment_conditions"

    def matches(self, query: FactQuery) -> bool:
        return bool(query.category) and contains_any(query.text, ENROLLMENT)

    def handle(self, query: FactQuery, data: Data, school: Dict[str, Any]) -> str:
        conditions = field(category_row(data, query.category), "enrollment_conditions")
        return f"UVJETI UPISA ZA {query.category}:\n• {conditions}" if conditions else ""


class CategoryHoursAgent(BaseAgent):
    name = "category_hours"

    def matches(self, query: FactQuery) -> bool:
        return bool(query.category) and contains_any(query.text, HOURS)

    def handle(self, query: FactQuery, data: Data, school: Dict[str, Any]) -> str:
        row = category_row(data, query.category)
        if not row:
            return ""
        return (
            f"SATNICA ZA {query.category}:\n"
            f"• Teorija: {field(row, 'theory_hours', '?')}h\n"
            f"• Praksa: {field(row, 'practice_hours', '?')}h"
        )
