"""Formatting helpers that turn store rows into the short lines the bot replies with."""
import math
import re
from typing import Any, Dict, List, Optional

from .fields import as_text, field
from ..app.preprocess import category_matches, normalize

KN_PER_EURO = 7.5345
VEHICLE_LIST_LIMIT = 30

_NUMBER = re.compile(r"-?\d[\d.,\s]*")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_amount(value: Any) -> Optional[float]:
    """Numeric part of a price cell ("6.000,00 kn" -> 6000.0), or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _NUMBER.search(as_text(value))
    if not match:
        return None
    digits = re.sub(r"\s+", "", match.group(0)).rstrip(".,")
    if "," in digits and "." in digits:
        # whichever separator comes last is the decimal one
        if digits.rfind(",") > digits.rfind("."):
            digits = digits.replace(".", "").replace(",", ".")
        else:
            digits = digits.replace(",", "")
    elif "," in digits:
        digits = digits.replace(",", ".")
    elif re.fullmatch(r"-?\d{1,3}(\.\d{3})+", digits):
        digits = digits.replace(".", "")
    try:
        return float(digits)
    except ValueError:
        return None


def _format_number(num: float) -> str:
    if float(num).is_integer():
        return str(int(num))
    return f"{num:.2f}".rstrip("0").rstrip(".")


def euro_amount(value: Any) -> Optional[float]:
    """Amount in euro; kuna amounts are converted with the fixed rate."""
    num = parse_amount(value)
    if num is None:
        return None
    text = as_text(value).lower()
    if "kn" in text or "hrk" in text:
        return num / KN_PER_EURO
    return num


def convert_to_euro(value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{_format_number(value)} €"
    text = as_text(value).strip()
    if not text:
        return ""
    lowered = text.lower()
    if "€" in text or "eur" in lowered:
        return text
    num = euro_amount(text)
    if num is None:
        return text
    if "kn" in lowered or "hrk" in lowered:
        return f"{round_half_up(num)} €"
    return f"{_format_number(num)} €"


def monthly_rate(value: Any, months: int = 12) -> str:
    num = euro_amount(value)
    if num is None:
        return "—"
    return f"{round_half_up(num / months)} €/mj"


def payment_terms_text(rows: List[Dict[str, Any]]) -> str:
    """Only the first UVJETI PLAĆANJA row is active."""
    if not rows:
        return ""
    first = rows[0]
    explicit = field(first, "payment_description")
    if explicit:
        return explicit
    parts = [
        ("Vrste plaćanja", field(first, "payment_kinds")),
        ("Načini plaćanja", field(first, "payment_methods")),
        ("Rate", field(first, "installments")),
        ("Avans", field(first, "deposit")),
        ("Rokovi", field(first, "deadlines")),
    ]
    return " | ".join(f"{label}: {value}" for label, value in parts if value)


def format_location(row: Optional[Dict[str, Any]]) -> str:
    if not row:
        return ""
    name = field(row, "location_name") or field(row, "location_kind") or "Lokacija"
    pieces = [name]
    for key in ("location_address", "location_city"):
        value = field(row, key)
        if value and value not in pieces:
            pieces.append(value)
    line = ", ".join(pieces)
    phone = field(row, "location_phone")
    if phone:
        line += f" | Tel: {phone}"
    url = field(row, "map_url")
    if url:
        line += f" | Mapa: {url}"
    return line


def format_vehicle(row: Dict[str, Any]) -> str:
    category = field(row, "vehicle_category")
    model = field(row, "vehicle_model") or field(row, "vehicle_type")
    year = field(row, "vehicle_year")
    gearbox = field(row, "transmission")
    location = field(row, "vehicle_location")
    line = "• "
    if category:
        line += f"[{category}] "
    line += model
    if year:
        line += f" ({year})"
    if gearbox:
        line += f" – {gearbox}"
    if location:
        line += f" | {location}"
    return line


def list_vehicles(rows: List[Dict[str, Any]], category: str = "", location_hint: str = "",
                  limit: int = VEHICLE_LIST_LIMIT) -> str:
    if not rows:
        return ""
    hint = normalize(location_hint)
    items = [
        format_vehicle(r)
        for r in rows
        if category_matches(field(r, "vehicle_category"), category)
        and (not hint or hint in normalize(field(r, "vehicle_location")))
    ]
    if not items:
        return ""
    text = "\n".join(items[:limit])
    if len(items) > limit:
        text += f"\n…i još {len(items) - limit} vozila."
    return text
