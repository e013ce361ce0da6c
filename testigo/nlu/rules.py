"""Rule-based trigger vocabularies and the category/price gate.

All vocabularies are written in normalized form (no diacritics) because they
are matched against `normalize(message)`.
"""
import re
from typing import Iterable

from ..app.preprocess import normalize

SCHOOL_LOCATION = ["adresa", "adresu", "gdje ste", "gdje se nalazite", "lokacija", "gdje je autoskola",
                   "kako doci do vas", "gdje vas mogu naci"]
INSTRUCTORS = ["instruktor", "instruktora", "instruktori", "instruktore", "tko vozi", "predavac"]
CATEGORY_SUMMARY = ["sve info", "sve informacije", "sve o", "cijen", "sati", "hak", "naknad",
                    "koliko kosta", "paket"]
PAYMENT = ["placan", "kartic", "obrok", "avans", "uplat", "nacin plac", "gotovin"]
FLEET = ["vozni park", "vozil", "automobil", "mjenjac"]
MINIMUM_AGE = ["minimalna dob", "koliko godina", "godina"]
ENROLLMENT = ["uvjeti upisa", "dokument", "sto trebam ponijeti", "sto moram ponijeti", "sto mi treba za upis"]
HOURS = ["koliko sati", "satnica", "teorija", "praksa"]

# engine / fuel words that narrow the instructor roster
FUEL_TERMS = ["dizel", "benzin", "elektri", "hibrid", "plin"]
GENERIC_ENGINE_TERMS = ["gorivo", "motor", "pogon"]

# partner locations: triggers, location-kind keywords, reply header
PARTNER_LOCATIONS = [
    {
        "kind": "exam_center",
        "triggers": ["ispitni centar", "ispitnog centra", "gdje se polaze", "gdje je ispit", "polaganje voznje"],
        "keywords": ["ispitni", "centar", "ispit"],
        "header": "ISPITNI CENTAR",
    },
    {
        "kind": "first_aid",
        "triggers": ["prva pomoc", "prve pomoci", "prvu pomoc"],
        "keywords": ["prva pomoc", "crveni kriz"],
        "header": "PRVA POMOĆ",
    },
    {
        "kind": "medical",
        "triggers": ["lijecnick", "medicina rada", "pregled"],
        "keywords": ["medicina rada", "lijecnick", "ordinacija", "poliklinika"],
        "header": "MEDICINA RADA – Liječnički pregled",
    },
    {
        "kind": "polygon",
        "triggers": ["poligon", "vjezbaliste"],
        "keywords": ["poligon", "vjezbaliste"],
        "header": "POLIGON",
    },
]

_CATEGORY_TOKEN = re.compile(r"\b(am|a1|a2|a|b|be|c|ce|d|f|g)\b|kategor|\bkod\s*9[56]\b")
_BUSINESS_WORDS = re.compile(
    r"(cijena|cijene|koliko\s*kosta|kosta|\bsati\b|satnic|\bhak\b|naknad|paket|minimalna\s*dob"
    r"|uvjeti\s*upisa|vozni\s*park|vozila|informacij|\bupis|teorij|praks|voznj|\blekcij|\bsat\b"
    r"|dodatn\w*\s*sat)"
)
_RATE = re.compile(r"\brat[aeiu]?\b")


def contains_any(text: str, vocab: Iterable[str]) -> bool:
    """Substring test of a normalized message against a vocabulary."""
    return any(phrase in text for phrase in vocab)


def asks_payment(text: str) -> bool:
    return contains_any(text, PAYMENT) or _RATE.search(text) is not None


def is_category_or_price_query(message: str) -> bool:
    """Structured-data questions are answered from tables, never from the FAQ."""
    q = normalize(message)
    if not q:
        return False
    return bool(_CATEGORY_TOKEN.search(q) or _BUSINESS_WORDS.search(q))
