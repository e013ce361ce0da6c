#!/usr/bin/env python3
import os
import sys
import unittest
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

sys.path.insert(0, os.path.dirname(__file__))
from fakes import FakeAirtable, make_store
from testigo.data.fields import TABLES
from testigo.data.record_store import (
    AirtableClient,
    FetchResult,
    RecordStore,
    RecordStoreError,
    merge_bundle,
    slug_formula,
)


class TestFormula(unittest.TestCase):
    def test_slug_is_sanitized(self):
        self.assertEqual(slug_formula("Slug", ' Demo"'), '{Slug} = "demo"')


class TestFetchTable(unittest.TestCase):
    def test_server_side_filter(self):
        store = make_store({"INSTRUKTORI": [{"Slug": "demo", "Ime i prezime": "Ana"},
                                            {"Slug": "other", "Ime i prezime": "Ivo"}]})
        result = store.fetch_table("instruktori", TABLES["instruktori"], "demo")
        self.assertTrue(result.ok)
        self.assertEqual([r["Ime i prezime"] for r in result.rows], ["Ana"])
        self.assertEqual(result.source, "INSTRUKTORI")

    def test_local_filter_over_alias_columns(self):
        rows = [
            {"Slug (autoškola)": "demo", "Naziv": "mine"},
            {"Slug (autoškola)": "other", "Naziv": "theirs"},
            {"Naziv": "shared"},
        ]
        store = make_store({"DODATNE USLUGE": rows})
        result = store.fetch_table("dodatne", TABLES["dodatne"], "demo")
        self.assertEqual([r["Naziv"] for r in result.rows], ["mine", "shared"])

    def test_second_name_variant(self):
        store = make_store({"LOKACIJE & PARTNERI": [{"Slug": "demo", "Tip lokacije": "Poligon"}]})
        result = store.fetch_table("lokacije", TABLES["lokacije"], "demo")
        self.assertTrue(result.ok)
        self.assertEqual(result.source, "LOKACIJE & PARTNERI")

    def test_missing_table_is_a_failure(self):
        result = make_store({}).fetch_table("vozni", TABLES["vozni"], "demo")
        self.assertFalse(result.ok)
        self.assertEqual(result.error.table, "VOZNI PARK")
        self.assertIn("404", result.error.message)
        self.assertEqual(result.rows_or_empty(), [])


class TestFetchSchool(unittest.TestCase):
    def test_alias_slug_column(self):
        store = make_store({"AUTOŠKOLE": [{"Slug (autoškola)": "other"}, {"Slug (autoškola)": "demo", "Adresa": "Ilica 1"}]})
        self.assertEqual(store.fetch_school("demo")["Adresa"], "Ilica 1")

    def test_no_match_is_empty(self):
        store = make_store({"AUTOŠKOLE": [{"Slug": "other", "Adresa": "X"}]})
        self.assertEqual(store.fetch_school("demo"), {})

    def test_table_unavailable(self):
        self.assertEqual(make_store({}, failing=["AUTOŠKOLE"]).fetch_school("demo"), {})

    def test_unexpected_error_is_empty(self):
        store = make_store({}, broken={"AUTOŠKOLE": ValueError("Expecting value: line 1 column 1")})
        self.assertEqual(store.fetch_school("demo"), {})


class TestBundle(unittest.TestCase):
    def test_failed_table_does_not_break_the_bundle(self):
        store = make_store(
            {"LOKACIJE": [{"Slug": "demo", "Tip lokacije": "Poligon"}], "FAQ": [{"Pitanja": "q", "Odgovor": "a"}]},
            failing=["LOKACIJE"],
        )
        results = store.load_bundle("demo")
        self.assertEqual(set(results), set(TABLES))
        self.assertFalse(results["lokacije"].ok)
        self.assertTrue(results["faq"].ok)
        self.assertEqual(results["faq"].source, "FAQ")

    def test_unexpected_exception_becomes_failure(self):
        client = MagicMock()
        client.list_records.side_effect = KeyError("boom")
        store = RecordStore(client=client, base_id="app", faq_base_id="app", default_slug="demo")
        results = store.load_bundle("demo")
        self.assertTrue(all(not r.ok for r in results.values()))

    def test_merge_bundle(self):
        results = {
            "cjenik": FetchResult(key="cjenik", rows=[{"Cijena": "1 €"}]),
            "vozni": FetchResult.failure("vozni", "VOZNI PARK", "HTTP 503"),
        }
        self.assertEqual(merge_bundle(results), {"cjenik": [{"Cijena": "1 €"}], "vozni": []})

    def test_faq_comes_from_faq_base(self):
        client = FakeAirtable({"FAQ - Odgovori na pitanja": [{"Pitanja": "q"}]})
        store = RecordStore(client=client, base_id="appSCHOOL", faq_base_id="appGLOBAL", default_slug="demo")
        store.fetch_all("faq", TABLES["faq"])
        self.assertEqual(client.calls, [("appGLOBAL", "FAQ - Odgovori na pitanja", None)])


class TestAirtableClient(unittest.TestCase):
    def response(self, status, payload):
        resp = MagicMock(status_code=status, text="err")
        resp.json.return_value = payload
        return resp

    def test_pagination(self):
        client = AirtableClient(api_key="key", api_url="https://airtable.test/v0", timeout=5)
        pages = [
            self.response(200, {"records": [{"fields": {"n": 1}}], "offset": "next"}),
            self.response(200, {"records": [{"fields": {"n": 2}}]}),
        ]
        with patch.object(client.session, "get", side_effect=pages) as get:
            rows = client.list_records("app", "VOZNI PARK", formula='{Slug} = "demo"')
        self.assertEqual(rows, [{"n": 1}, {"n": 2}])
        url = get.call_args_list[0][0][0]
        self.assertEqual(url, "https://airtable.test/v0/app/VOZNI%20PARK")
        self.assertEqual(get.call_args_list[1][1]["params"]["offset"], "next")
        self.assertEqual(get.call_args_list[0][1]["headers"]["Authorization"], "Bearer key")

    def test_http_error(self):
        client = AirtableClient(api_key="key", api_url="https://airtable.test/v0", timeout=5)
        with patch.object(client.session, "get", return_value=self.response(404, {})):
            with self.assertRaises(RecordStoreError):
                client.list_records("app", "NEMA")

    def test_non_json_body(self):
        client = AirtableClient(api_key="key", api_url="https://airtable.test/v0", timeout=5)
        resp = self.response(200, None)
        resp.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
        with patch.object(client.session, "get", return_value=resp):
            with self.assertRaises(RecordStoreError):
                client.list_records("app", "AUTOŠKOLE")

    def test_unexpected_payload_shape(self):
        client = AirtableClient(api_key="key", api_url="https://airtable.test/v0", timeout=5)
        with patch.object(client.session, "get", return_value=self.response(200, ["not", "a", "dict"])):
            with self.assertRaises(RecordStoreError):
                client.list_records("app", "AUTOŠKOLE")

    def test_session_per_thread(self):
        client = AirtableClient(api_key="key", api_url="https://airtable.test/v0", timeout=5)
        with ThreadPoolExecutor(max_workers=2) as pool:
            other = pool.submit(lambda: client.session).result()
        self.assertIs(client.session, client.session)
        self.assertIsNot(client.session, other)


if __name__ == "__main__":
    unittest.main()
