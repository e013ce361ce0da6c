#!/usr/bin/env python3
import unittest

from testigo.agents.base_agent import FactQuery
from testigo.agents.category_agent import build_category_summary
from testigo.nlu.fact_router import FACT_HANDLERS, FactHandler, extract_facts, route_facts


def sample_data():
    return {
        "kategorije": [
            {"Kategorija": "B", "Broj sati teorija": 30, "Broj sati praksa": 35,
             "Minimalna dob": 17, "Uvjeti upisa": "osobna iskaznica"},
        ],
        "cjenik": [
            {"Kategorija": "B", "Varijanta": "Standard", "Cijena": "6000 kn", "Napomena": "uklj. PP"},
            {"Kategorija": "A2", "Varijanta": "Moto", "Cijena": "700 €"},
        ],
        "hak": [{"Kategorija": "B", "Vrsta predmeta": "Ispit vožnje", "Iznos": "60 €"}],
        "uvjeti": [{"Opis uvjeta": "Moguće na rate."}],
        "dodatne": [{"Kategorija": "B", "Naziv usluge": "Dodatni sat vožnje", "Iznos": "35 €"}],
        "instruktori": [
            {"Ime i prezime": "Ana", "Vozilo": "Golf dizel", "Lokacija": "Zagreb"},
            {"Ime i prezime": "Ivo", "Vozilo": "Clio benzin", "Lokacija": "Split"},
        ],
        "vozni": [{"Kategorija": "B", "Naziv vozila": "Škoda Fabia"}],
        "lokacije": [
            {"Tip lokacije": "Ured autoškole", "Adresa": "Ilica 5"},
            {"Tip lokacije": "Poligon za vježbanje", "Adresa": "Ulica 1, Grad"},
            {"Tip lokacije": "Ispitni centar", "Naziv": "HAK centar", "Adresa": "Savska 1"},
        ],
    }


class TestCategorySummary(unittest.TestCase):
    def test_sections_in_fixed_order(self):
        text = build_category_summary("b", sample_data())
        lines = text.splitlines()
        self.assertEqual(lines[0], "✅ KATEGORIJA B")
        self.assertIn("• Sati: Teorija 30h, Praksa 35h", text)
        self.assertIn("  - Standard: 796 € (66 €/mj) — uklj. PP", text)
        self.assertIn("  - Ispit vožnje: 60 €", text)
        self.assertIn("• Uvjeti plaćanja: Moguće na rate.", text)
        self.assertIn("  - Dodatni sat (B): 35 €", text)
        order = [text.index(h) for h in ("• Sati", "• Cijene", "• Ispitne naknade", "• Uvjeti plaćanja", "• Dodatni sat")]
        self.assertEqual(order, sorted(order))

    def test_other_categories_are_left_out(self):
        self.assertNotIn("Moto", build_category_summary("Kategorija B", sample_data()))

    def test_empty_when_nothing_known(self):
        self.assertEqual(build_category_summary("C", sample_data()), "")
        self.assertEqual(build_category_summary("B", {"uvjeti": [{"Opis uvjeta": "x"}]}), "")
        self.assertEqual(build_category_summary("nepoznato", sample_data()), "")


class TestFactRouter(unittest.TestCase):
    def route(self, message, school=None, **kwargs):
        return route_facts(FactQuery.from_message(message, **kwargs), sample_data(), school or {})

    def test_handler_order(self):
        self.assertEqual(
            [h.name for h in FACT_HANDLERS],
            ["school_location", "instructors", "category_summary", "partner_location", "payment_terms",
             "fleet", "minimum_age", "enrollment_conditions", "category_hours"],
        )

    def test_polygon(self):
        result = self.route("Gdje se nalazi poligon?")
        self.assertEqual(result.agent, "partner_location")
        self.assertEqual(result.text, "POLIGON:\n• Poligon za vježbanje, Ulica 1, Grad")

    def test_exam_centre(self):
        result = self.route("Gdje je ispitni centar?")
        self.assertEqual(result.text, "ISPITNI CENTAR:\n• HAK centar, Savska 1")

    def test_school_address_from_profile(self):
        result = self.route("Koja je vaša adresa?", school={"Adresa": "Ilica 1", "Radno_vrijeme": "8-16"})
        self.assertEqual(result.agent, "school_location")
        self.assertEqual(result.text, "ADRESA AUTOŠKOLE:\n• Ilica 1\n• Radno vrijeme: 8-16")

    def test_school_address_from_locations(self):
        result = self.route("Koja je vaša adresa?")
        self.assertEqual(result.text, "ADRESA AUTOŠKOLE:\n• Ured autoškole, Ilica 5")

    def test_category_price(self):
        result = self.route("Koliko košta kategorija B?")
        self.assertEqual(result.agent, "category_summary")
        self.assertTrue(result.text.startswith("✅ KATEGORIJA B"))

    def test_instructors_by_fuel(self):
        result = self.route("Koji instruktori voze dizel?")
        self.assertEqual(result.text, "INSTRUKTORI:\n• Ana | Golf dizel | Zagreb")

    def test_instructors_by_location(self):
        result = self.route("instruktori u splitu")
        self.assertEqual(result.text, "INSTRUKTORI – Split:\n• Ivo | Clio benzin")

    def test_instructors_grouped(self):
        result = self.route("tko su instruktori", group_instructors=True)
        self.assertEqual(
            result.text,
            "INSTRUKTORI:\n📍 Zagreb:\n• Ana | Golf dizel\n\n📍 Split:\n• Ivo | Clio benzin",
        )

    def test_payment(self):
        result = self.route("Može li se plaćati karticom?")
        self.assertEqual(result.agent, "payment_terms")
        self.assertEqual(result.text, "UVJETI PLAĆANJA:\nMoguće na rate.")

    def test_fleet(self):
        result = self.route("Koja vozila imate za kategoriju B?")
        self.assertEqual(result.text, "VOZNI PARK – Kategorija B:\n• [B] Škoda Fabia")

    def test_minimum_age(self):
        result = self.route("Koja je minimalna dob za kategoriju B?")
        self.assertEqual(result.text, "MINIMALNA DOB ZA B:\n• 17 godina")

    def test_hours(self):
        result = self.route("Satnica za kategoriju B?")
        self.assertEqual(result.text, "SATNICA ZA B:\n• Teorija: 30h\n• Praksa: 35h")

    def test_nothing_fires(self):
        self.assertIsNone(self.route("kako ste danas"))
        self.assertEqual(extract_facts("kako ste danas", sample_data(), {}), "")

    def test_empty_handler_output_falls_through(self):
        handlers = [
            FactHandler("silent", lambda q: True, lambda q, d, s: ""),
            FactHandler("second", lambda q: True, lambda q, d, s: "drugi"),
            FactHandler("third", lambda q: True, lambda q, d, s: "treći"),
        ]
        result = route_facts(FactQuery.from_message("bilo što"), {}, {}, handlers)
        self.assertEqual((result.agent, result.text), ("second", "drugi"))


if __name__ == "__main__":
    unittest.main()
