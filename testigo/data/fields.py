"""Field alias table for the Airtable schema.

The school bases drifted over time: the same logical attribute appears under
several column spellings depending on when a base was cloned. Every lookup
goes through FIELD_ALIASES so the accepted spellings live in one place.
"""
from typing import Any, Dict, Optional, Tuple

# logical table key -> table name variants, first existing one wins
TABLES: Dict[str, Tuple[str, ...]] = {
    "kategorije": ("KATEGORIJE", "KATEGORIJE AUTOŠKOLE"),
    "cjenik": ("CJENIK", "CJENIK I PRAVILA"),
    "hak": ("PLAĆANJE HAK-u", "NAKNADE ZA POLAGANJE"),
    "uvjeti": ("UVJETI PLAĆANJA",),
    "dodatne": ("DODATNE USLUGE",),
    "instruktori": ("INSTRUKTORI",),
    "vozni": ("VOZNI PARK",),
    "lokacije": ("LOKACIJE", "LOKACIJE & PARTNERI"),
    "nastava": ("NASTAVA & PREDAVANJA",),
    "upisi": ("UPIŠI SE ONLINE",),
    "faq": ("FAQ - Odgovori na pitanja", "FAQ", "FAQ – Odgovori", "FAQ Odgovori"),
}

SCHOOL_TABLE = "AUTOŠKOLE"

FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "slug": ("Slug", "Slug (autoškola)", "Slug (Autoškola)", "slug (autoškola)"),
    # school profile
    "persona": ("AI_PERSONA",),
    "tone": ("AI_TON",),
    "style": ("AI_STIL",),
    "rules": ("AI_PRAVILA",),
    "greeting": ("AI_POZDRAV",),
    "school_name": ("Naziv autoškole", "Naziv"),
    "phone": ("Telefon", "Telefon (fiksni)", "Mobitel"),
    "email": ("Email", "E-mail"),
    "web": ("Web", "Web stranica"),
    "working_hours": ("Radno_vrijeme", "Radno vrijeme"),
    "address": ("Adresa",),
    "location_description": ("Opis lokacije", "Lokacija"),
    "map_url": ("Geo_URL", "URL", "Maps", "Google Maps", "Link na Google Maps"),
    # KATEGORIJE
    "category": ("Kategorija", "Kategorija_ref", "Namjena (kategorija)"),
    "category_label": ("Kategorija", "Naziv"),
    "theory_hours": ("Broj sati teorija", "Broj_sati_teorija"),
    "practice_hours": ("Broj sati praksa", "Broj_sati_praksa"),
    "duration": ("Trajanje (tipično)", "Trajanje"),
    "minimum_age": ("Minimalna dob", "Minimalna_dob"),
    "enrollment_conditions": ("Uvjeti upisa", "Uvjeti_upisa"),
    # CJENIK
    "price_variant": ("Varijanta", "Naziv"),
    "price": ("Cijena",),
    "note": ("Napomena",),
    # HAK naknade
    "fee_name": ("Vrsta predmeta", "Naziv naknade", "Naziv"),
    "fee_amount": ("Iznos",),
    # UVJETI PLAĆANJA
    "payment_description": ("Opis uvjeta", "Opis"),
    "payment_kinds": ("Vrste plaćanja",),
    "payment_methods": ("Načini_plaćanja", "Načini plaćanja"),
    "installments": ("Rate_mogućnost", "Rate"),
    "deposit": ("Avans",),
    "deadlines": ("Rokovi",),
    # DODATNE USLUGE
    "service_name": ("Naziv usluge", "Naziv"),
    "service_price": ("Iznos", "Cijena"),
    # INSTRUKTORI
    "instructor_name": ("Ime i prezime instruktora", "Ime i prezime", "Instruktor"),
    "instructor_categories": ("Kategorije",),
    "instructor_vehicle": ("Vozilo koje koristi", "Vozilo"),
    "instructor_location": ("Lokacija", "Lokacija rada", "Poslovnica"),
    "instructor_engine": ("Motor / gorivo", "Gorivo", "Napomena"),
    # VOZNI PARK
    "vehicle_category": ("Kategorija", "Namjena (kategorija)", "Kategorija_ref"),
    "vehicle_model": ("Naziv vozila", "Model", "Naziv"),
    "vehicle_type": ("Tip vozila", "Tip", "Vrsta vozila"),
    "vehicle_year": ("Godina",),
    "transmission": ("Mjenjač", "Mjenjac"),
    "vehicle_location": ("Lokacija", "Poslovnica", "Mjesto"),
    # LOKACIJE
    "location_kind": ("Tip lokacije", "Tip", "Vrsta"),
    "location_name": ("Naziv ustanove / partnera", "Naziv"),
    "location_address": ("Adresa", "Lokacija"),
    "location_city": ("Mjesto", "Grad"),
    "location_phone": ("Telefon", "Kontakt"),
    "location_note": ("Napomena", "Opis"),
    # FAQ
    "faq_question": ("PITANJA", "Pitanja", "Pitanje"),
    "faq_examples": ("Primjeri upita", "Primjer upita"),
    "faq_keywords": ("Ključne riječi", "Kljucne rijeci"),
    "faq_answer": ("ODGOVORI", "Odgovor", "Odgovori"),
    "faq_active": ("AKTIVNO", "Aktivno"),
}

AI_HINT_FIELDS = ("AI_CONTEXT", "AI_INTENT_PATTERNS", "AI_OUTPUT_RULES", "AI_DISAMBIGUATION", "AI_FALLBACK")


def as_text(value: Any) -> str:
    """Flatten an Airtable cell (lookup lists, numbers, None) into a string."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else ""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def raw_field(record: Dict[str, Any], name: str) -> Optional[Any]:
    """First aliased cell that is present in the record, untouched."""
    for alias in FIELD_ALIASES[name]:
        if alias in record and record[alias] is not None:
            return record[alias]
    return None


def field(record: Optional[Dict[str, Any]], name: str, default: str = "") -> str:
    """First non-empty aliased cell as stripped text."""
    if not record:
        return default
    for alias in FIELD_ALIASES[name]:
        value = as_text(record.get(alias)).strip()
        if value:
            return value
    return default


def has_any_field(record: Dict[str, Any], name: str) -> bool:
    return any(alias in record for alias in FIELD_ALIASES[name])
