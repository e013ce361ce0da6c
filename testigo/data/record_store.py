#!/usr/bin/env python3
"""
Record store access for the driving-school chatbot.

Every school keeps its data in an Airtable base; rows carry the school's slug.
This module reads those tables over the Airtable REST API and degrades a failed
table to an explicit FetchResult error instead of aborting the request.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field as dataclass_field
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import requests

from ..app.config import Config
from ..app.preprocess import normalize_slug
from ..utils.logger import get_logger
from .fields import SCHOOL_TABLE, TABLES, field, has_any_field

logger = get_logger("store")

Row = Dict[str, Any]

# Slug column spellings tried for server-side lookup of the school row.
SCHOOL_SLUG_FORMULA_FIELDS = ("Slug (autoškola)", "Slug (Autoškola)", "slug (autoškola)", "Slug")
TABLE_MAX_RECORDS = 200
FAQ_MAX_RECORDS = 500


class RecordStoreError(Exception):
    """Transport or HTTP failure talking to the record store."""


@dataclass
class FetchError:
    table: str
    message: str


@dataclass
class FetchResult:
    """Rows of one logical table, or the reason they could not be read."""
    key: str
    rows: List[Row] = dataclass_field(default_factory=list)
    error: Optional[FetchError] = None
    source: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    def rows_or_empty(self) -> List[Row]:
        return self.rows if self.ok else []

    @classmethod
    def failure(cls, key: str, table: str, message: str) -> "FetchResult":
        return cls(key=key, error=FetchError(table=table, message=message))


def sanitize_for_formula(value: Any) -> str:
    return normalize_slug(value).replace('"', "").replace("'", "’")


def slug_formula(column: str, slug: str) -> str:
    return f'{{{column}}} = "{sanitize_for_formula(slug)}"'


class AirtableClient:
    """Thin client for the Airtable list-records endpoint."""

    def __init__(self, api_key: str = None, api_url: str = None, timeout: float = None):
        self.api_key = api_key or Config.AIRTABLE_API_KEY
        self.api_url = (api_url or Config.AIRTABLE_API_URL).rstrip("/")
        self.timeout = timeout or Config.AIRTABLE_TIMEOUT_SECONDS
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """One Session per thread; load_bundle calls the client from a worker pool."""
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    def list_records(self, base_id: str, table: str, formula: Optional[str] = None,
                     max_records: int = TABLE_MAX_RECORDS) -> List[Row]:
        """
        Fetch the `fields` of every record in a table, following pagination.

        Args:
            base_id: Airtable base identifier
            table: Table name as shown in Airtable
            formula: Optional filterByFormula expression
            max_records: Upper bound on returned records

        Returns:
            List of field dictionaries
        """
        url = f"{self.api_url}/{base_id}/{quote(table, safe='')}"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        params: Dict[str, Any] = {"maxRecords": max_records, "pageSize": min(100, max_records)}
        if formula:
            params["filterByFormula"] = formula

        rows: List[Row] = []
        while True:
            try:
                response = self.session.get(url, headers=headers, params=params, timeout=self.timeout)
            except requests.exceptions.RequestException as e:
                raise RecordStoreError(f"{table}: {e}") from e
            if response.status_code != 200:
                raise RecordStoreError(f"{table}: HTTP {response.status_code} {response.text[:200]}")
            try:
                data = response.json()
                rows.extend(rec.get("fields") or {} for rec in data.get("records", []))
                offset = data.get("offset")
            except (ValueError, AttributeError) as e:
                raise RecordStoreError(f"{table}: unreadable response body: {e}") from e
            if not offset or len(rows) >= max_records:
                return rows[:max_records]
            params["offset"] = offset


def row_slug(row: Row) -> str:
    return normalize_slug(field(row, "slug"))


class RecordStore:
    """Per-tenant table access with schema-drift tolerance."""

    def __init__(self, client: AirtableClient = None, base_id: str = None, faq_base_id: str = None,
                 default_slug: str = None):
        self.client = client or AirtableClient()
        self.base_id = base_id or Config.AIRTABLE_BASE_ID_INDIVIDUAL
        self.faq_base_id = faq_base_id or Config.faq_base_id()
        self.default_slug = default_slug or Config.SCHOOL_SLUG

    def fetch_school(self, slug: str) -> Row:
        """School profile row for the slug, {} when none matches or the lookup fails."""
        try:
            return self._lookup_school(slug)
        except Exception:
            logger.exception(f"[STORE] unexpected failure reading {SCHOOL_TABLE}")
            return {}

    def _lookup_school(self, slug: str) -> Row:
        safe = sanitize_for_formula(slug or self.default_slug)
        for column in SCHOOL_SLUG_FORMULA_FIELDS:
            try:
                rows = self.client.list_records(self.base_id, SCHOOL_TABLE, slug_formula(column, safe), max_records=1)
            except RecordStoreError as e:
                logger.debug(f"[STORE] school lookup via {{{column}}} failed: {e}")
                continue
            if rows:
                return rows[0]
        try:
            rows = self.client.list_records(self.base_id, SCHOOL_TABLE, max_records=TABLE_MAX_RECORDS)
        except RecordStoreError as e:
            logger.warning(f"[STORE] AUTOŠKOLE_WARN {e}")
            return {}
        for row in rows:
            if row_slug(row) == safe:
                return row
        return {}

    def fetch_table(self, key: str, name_variants: Sequence[str], slug: str) -> FetchResult:
        """
        Rows of a per-tenant table.

        The server-side slug filter is tried first; when it errors (no such
        column) or returns nothing the table is read whole and filtered
        locally over every slug column spelling. Rows without any slug column
        are shared by all schools and are kept.
        """
        safe = sanitize_for_formula(slug or self.default_slug)
        last_error = ""
        for name in name_variants:
            try:
                filtered = self.client.list_records(self.base_id, name, slug_formula("Slug", safe))
                if filtered:
                    return FetchResult(key=key, rows=filtered, source=name)
            except RecordStoreError as e:
                logger.debug(f"[STORE] server-side filter on {name} failed: {e}")
            try:
                rows = self.client.list_records(self.base_id, name)
            except RecordStoreError as e:
                last_error = str(e)
                continue
            kept = [r for r in rows if not has_any_field(r, "slug") or row_slug(r) == safe]
            return FetchResult(key=key, rows=kept, source=name)
        return FetchResult.failure(key, name_variants[0], last_error or "table not found")

    def fetch_all(self, key: str, name_variants: Sequence[str], base_id: str = None) -> FetchResult:
        """Whole table without slug filtering (shared FAQ)."""
        last_error = ""
        for name in name_variants:
            try:
                rows = self.client.list_records(base_id or self.faq_base_id, name, max_records=FAQ_MAX_RECORDS)
            except RecordStoreError as e:
                last_error = str(e)
                continue
            if rows:
                return FetchResult(key=key, rows=rows, source=name)
        if last_error:
            return FetchResult.failure(key, name_variants[0], last_error)
        return FetchResult(key=key)

    def _safe_fetch(self, key: str, slug: str) -> FetchResult:
        variants = TABLES[key]
        try:
            if key == "faq":
                return self.fetch_all(key, variants)
            return self.fetch_table(key, variants, slug)
        except Exception as e:
            logger.exception(f"[STORE] unexpected failure reading {key}")
            return FetchResult.failure(key, variants[0], str(e))

    def load_bundle(self, slug: str) -> Dict[str, FetchResult]:
        """Fetch every table for the school concurrently."""
        keys = list(TABLES)
        with ThreadPoolExecutor(max_workers=len(keys)) as pool:
            futures = {key: pool.submit(self._safe_fetch, key, slug) for key in keys}
            return {key: future.result() for key, future in futures.items()}


def merge_bundle(results: Dict[str, FetchResult]) -> Dict[str, List[Row]]:
    """Collapse fetch results into plain rows, failed tables becoming empty."""
    data: Dict[str, List[Row]] = {}
    for key, result in results.items():
        if not result.ok:
            logger.warning(f"[STORE] {key} unavailable ({result.error.table}): {result.error.message}")
        data[key] = result.rows_or_empty()
    return data


