#!/usr/bin/env python3
"""
Prompt builder module for the driving-school chatbot.

This module renders the school's profile and every table into one system
prompt. Each data section is always present so the model sees the same
structure whether or not a table has rows.
"""

from typing import Any, Dict, List

from .preprocess import normalize_slug
from ..data.fields import AI_HINT_FIELDS, FIELD_ALIASES, as_text, field
from ..data.formatters import (
    convert_to_euro,
    format_location,
    list_vehicles,
    monthly_rate,
    payment_terms_text,
)
from ..nlu.location_matcher import find_best_location

NO_DATA = "(nema podataka)"

DEFAULT_SCHOOL = {
    "AI_PERSONA": "Smiren, stručan instruktor.",
    "AI_TON": "prijateljski, jasan",
    "AI_STIL": "kratki odlomci; konkretno",
    "AI_PRAVILA": "Odgovaraj prvenstveno o autoškoli.",
    "AI_POZDRAV": "Bok! Kako ti mogu pomoći?",
}

HINT_LABELS = {
    "AI_CONTEXT": "Kontekst",
    "AI_INTENT_PATTERNS": "Namjere (uzorci)",
    "AI_OUTPUT_RULES": "Pravila izlaza",
    "AI_DISAMBIGUATION": "Rasplitanje/pojašnjenje",
    "AI_FALLBACK": "Fallback kad nema podatka",
}

_HIDDEN_COLUMNS = set(FIELD_ALIASES["slug"])


def extract_ai_sections(data: Dict[str, List[Dict[str, Any]]], slug: str) -> str:
    """
    Per-table AI_* instructions stored alongside the data.

    Args:
        data: Table rows keyed by logical table name
        slug: Current school slug

    Returns:
        One instruction block per table that carries AI_* columns
    """
    wanted = normalize_slug(slug)
    blocks = []
    for key, rows in data.items():
        if key == "faq" or not rows:
            continue
        with_hints = [r for r in rows if any(str(k).startswith("AI_") for k in r)]
        if not with_hints:
            continue
        row = next(
            (r for r in with_hints if not field(r, "slug") or normalize_slug(field(r, "slug")) == wanted),
            with_hints[0],
        )
        lines = [
            f"{HINT_LABELS[name]}: {as_text(row.get(name)).strip()}"
            for name in AI_HINT_FIELDS
            if as_text(row.get(name)).strip()
        ]
        if lines:
            blocks.append("\n".join([f"=== AI INSTRUKCIJE ZA TABLICU {key.upper()} ==="] + lines))
    return "\n\n".join(blocks)


def _generic_rows(rows: List[Dict[str, Any]]) -> str:
    lines = []
    for row in rows or []:
        parts = [
            f"{k}: {as_text(v).strip()}"
            for k, v in row.items()
            if k not in _HIDDEN_COLUMNS and not str(k).startswith("AI_") and as_text(v).strip()
        ]
        if parts:
            lines.append("• " + " | ".join(parts))
    return "\n".join(lines)


class PromptBuilder:
    """Builds the system prompt from the school profile and its tables."""

    def _categories(self, rows) -> str:
        lines = []
        for row in rows or []:
            label = field(row, "category_label")
            if not label:
                continue
            lines.append(
                f"• {label}: Teorija {field(row, 'theory_hours')}h | Praksa {field(row, 'practice_hours')}h"
                + (f" | Min. dob {field(row, 'minimum_age')}" if field(row, "minimum_age") else "")
            )
        return "\n".join(lines)

    def _prices(self, rows) -> str:
        lines = []
        for row in rows or []:
            raw = field(row, "price")
            lines.append(
                f"• {field(row, 'price_variant')} ({field(row, 'category')}) – "
                f"{convert_to_euro(raw) or '—'} ({monthly_rate(raw)})"
            )
        return "\n".join(lines)

    def _fees(self, rows) -> str:
        lines = []
        for row in rows or []:
            name = field(row, "fee_name")
            amount = convert_to_euro(field(row, "fee_amount"))
            category = field(row, "category")
            if name or amount:
                lines.append(f"• {name}{f' ({category})' if category else ''}: {amount}")
        return "\n".join(lines)

    def _services(self, rows) -> str:
        lines = []
        for row in rows or []:
            name = field(row, "service_name")
            category = field(row, "category")
            price = convert_to_euro(field(row, "service_price"))
            if name or category or price:
                lines.append(f"• {name}{f' ({category})' if category else ''}{f' – {price}' if price else ''}")
        return "\n".join(lines)

    def _instructors(self, rows) -> str:
        lines = []
        for row in rows or []:
            name = field(row, "instructor_name")
            categories = field(row, "instructor_categories")
            vehicle = field(row, "instructor_vehicle")
            location = field(row, "instructor_location")
            if name or categories or vehicle:
                line = f"• {name}"
                if categories:
                    line += f" – {categories}"
                if vehicle:
                    line += f" | {vehicle}"
                if location:
                    line += f" | {location}"
                lines.append(line)
        return "\n".join(lines)

    def _locations(self, rows) -> str:
        lines = []
        for row in rows or []:
            kind = field(row, "location_kind")
            lines.append(f"• {kind + ': ' if kind else ''}{format_location(row)}")
        return "\n".join(lines)

    def build_prompt(self, school: Dict[str, Any], data: Dict[str, List[Dict[str, Any]]],
                     facts: str = "", ai_sections: str = "") -> str:
        """
        Build the system prompt.

        Args:
            school: School profile row (AUTOŠKOLE)
            data: Table rows keyed by logical table name
            facts: Answer produced by the fact router, placed first when present
            ai_sections: Per-table AI_* instruction blocks

        Returns:
            Formatted system prompt string
        """
        school = school or DEFAULT_SCHOOL
        persona = field(school, "persona", DEFAULT_SCHOOL["AI_PERSONA"])
        tone = field(school, "tone", DEFAULT_SCHOOL["AI_TON"])
        style = field(school, "style", DEFAULT_SCHOOL["AI_STIL"])
        rules = field(school, "rules", "Odgovaraj isključivo prema podacima autoškole. Ne nagađaj.")
        greeting = field(school, "greeting", "Bok! 👋 Kako ti mogu pomoći oko upisa, cijena ili termina?")

        contact = " | ".join([
            field(school, "phone"),
            field(school, "email"),
            field(school, "web"),
            f"Radno vrijeme: {field(school, 'working_hours')}",
        ])
        address = field(school, "address") or field(school, "location_description")

        polygon = format_location(find_best_location(data.get("lokacije"), ["poligon", "vjezbaliste"]))

        sections = [
            ("KATEGORIJE", self._categories(data.get("kategorije"))),
            ("CJENIK", self._prices(data.get("cjenik"))),
            ("HAK naknade", self._fees(data.get("hak"))),
            ("Uvjeti plaćanja", payment_terms_text(data.get("uvjeti") or [])),
            ("Dodatne usluge", self._services(data.get("dodatne"))),
            ("Instruktori", self._instructors(data.get("instruktori"))),
            ("Vozni park", list_vehicles(data.get("vozni") or [])),
            ("Poligon", polygon),
            ("Lokacije i partneri", self._locations(data.get("lokacije"))),
            ("Nastava i predavanja", _generic_rows(data.get("nastava"))),
            ("Upis online", _generic_rows(data.get("upisi"))),
        ]

        parts = [
            "Ti si AI asistent autoškole.",
            "",
            "**Politika odgovaranja:**",
            "1) Koristi isključivo podatke autoškole (tablice + činjenice). Ne koristi vanjske izvore.",
            "2) Ako podatak ne postoji, reci iskreno da nemaš informaciju i ponudi kontakt. Ne izmišljaj.",
            "3) Za cijene i sate: primarni izvor je CJENIK + KATEGORIJE; HAK naknade iz tablice PLAĆANJE HAK-u; "
            "dodatni sat iz DODATNE USLUGE.",
            "4) Poštuj niže AI okvire (AI_CONTEXT/INTENT_PATTERNS/OUTPUT_RULES/DISAMBIGUATION/FALLBACK) za svaku tablicu.",
            "",
            f"Osobnost: {persona}",
            f"Ton: {tone}",
            f"Stil: {style}",
            f"Pravila: {rules}",
            "",
            f"Kontakt: {contact}",
        ]
        if address:
            parts.append(f"Adresa: {address}")
        if facts:
            parts += ["", "=== ČINJENICE ZA ODGOVOR (obavezno ih koristi, imaju prednost) ===", facts]
        if ai_sections:
            parts += ["", ai_sections]
        for title, body in sections:
            parts += ["", f"=== {title} ===", body or NO_DATA]
        parts += ["", f"Otvarajući pozdrav: {greeting}"]
        return "\n".join(parts).strip()
