#!/usr/bin/env python3
import unittest

from testigo.data.formatters import (
    convert_to_euro,
    format_location,
    list_vehicles,
    monthly_rate,
    parse_amount,
    payment_terms_text,
    round_half_up,
)
from testigo.nlu.location_matcher import find_best_location, location_score


class TestMoney(unittest.TestCase):
    def test_kuna_is_converted(self):
        self.assertEqual(convert_to_euro("6000 kn"), "796 €")
        self.assertEqual(convert_to_euro("6.000,00 kn"), "796 €")

    def test_euro_text_is_untouched(self):
        self.assertEqual(convert_to_euro("850 €"), "850 €")
        self.assertEqual(convert_to_euro("850 EUR"), "850 EUR")

    def test_numbers_and_plain_text(self):
        self.assertEqual(convert_to_euro(850), "850 €")
        self.assertEqual(convert_to_euro(12.5), "12.5 €")
        self.assertEqual(convert_to_euro("po dogovoru"), "po dogovoru")
        self.assertEqual(convert_to_euro(""), "")

    def test_monthly_rate(self):
        self.assertEqual(monthly_rate("6000 kn"), "66 €/mj")
        self.assertEqual(monthly_rate(1200), "100 €/mj")
        self.assertEqual(monthly_rate("na upit"), "—")

    def test_parse_amount(self):
        self.assertEqual(parse_amount("1.250 €"), 1250.0)
        self.assertEqual(parse_amount("12,50"), 12.5)
        self.assertEqual(parse_amount("1,250.75"), 1250.75)
        self.assertIsNone(parse_amount("besplatno"))

    def test_round_half_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(2.49), 2)


class TestPaymentTerms(unittest.TestCase):
    def test_explicit_description_wins(self):
        rows = [{"Opis uvjeta": "Plaćanje u 3 rate.", "Avans": "100 €"}]
        self.assertEqual(payment_terms_text(rows), "Plaćanje u 3 rate.")

    def test_parts_joined(self):
        rows = [{"Vrste plaćanja": "gotovina", "Rate_mogućnost": "do 12"}, {"Opis": "ignored"}]
        self.assertEqual(payment_terms_text(rows), "Vrste plaćanja: gotovina | Rate: do 12")

    def test_empty(self):
        self.assertEqual(payment_terms_text([]), "")


class TestLocations(unittest.TestCase):
    def test_format_location(self):
        row = {"Naziv": "Ispitni centar HAK", "Adresa": "Savska 1", "Mjesto": "Zagreb", "Telefon": "01 234"}
        self.assertEqual(format_location(row), "Ispitni centar HAK, Savska 1, Zagreb | Tel: 01 234")

    def test_format_location_falls_back_to_kind(self):
        self.assertEqual(format_location({"Tip lokacije": "Poligon"}), "Poligon")
        self.assertEqual(format_location({"Adresa": "Ulica 2"}), "Lokacija, Ulica 2")
        self.assertEqual(format_location(None), "")

    def test_kind_prefix_is_preferred(self):
        rows = [
            {"Tip lokacije": "Ured", "Napomena": "Blizu poligona za vježbanje", "Adresa": "A 1"},
            {"Tip lokacije": "Poligon", "Adresa": "B 2"},
        ]
        self.assertIs(find_best_location(rows, ["poligon"]), rows[1])
        self.assertEqual(location_score(rows[0], ["poligon"]), 2)
        self.assertEqual(location_score(rows[1], ["poligon"]), 4)

    def test_tie_keeps_first_row(self):
        rows = [{"Tip lokacije": "Poligon sjever"}, {"Tip lokacije": "Poligon jug"}]
        self.assertIs(find_best_location(rows, ["poligon"]), rows[0])

    def test_no_score_is_none(self):
        self.assertIsNone(find_best_location([{"Tip lokacije": "Ured"}], ["poligon"]))
        self.assertIsNone(find_best_location([], ["poligon"]))


class TestVehicles(unittest.TestCase):
    def test_filter_by_category(self):
        rows = [
            {"Kategorija": "B", "Naziv vozila": "Škoda Fabia", "Godina": 2021, "Mjenjač": "ručni"},
            {"Kategorija": "A2", "Naziv vozila": "Honda CB500"},
        ]
        self.assertEqual(list_vehicles(rows, "B"), "• [B] Škoda Fabia (2021) – ručni")
        self.assertEqual(list_vehicles(rows, "C"), "")

    def test_limit_suffix(self):
        rows = [{"Kategorija": "B", "Naziv vozila": f"Auto {i}"} for i in range(33)]
        listing = list_vehicles(rows, "B")
        self.assertEqual(len(listing.splitlines()), 31)
        self.assertTrue(listing.endswith("…i još 3 vozila."))


if __name__ == "__main__":
    unittest.main()
