#!/usr/bin/env python3
"""
Inspect one school's data: print the profile row and every table fetch result,
and optionally show how a message would be routed (no model call).

Usage:
  python testigo/scripts/inspect_tenant.py --slug instruktor
  python testigo/scripts/inspect_tenant.py --slug instruktor --message "Gdje je poligon?"

Notes:
- Read-only; makes no writes to Airtable.
"""

from __future__ import annotations

import argparse
import os
import sys

# Allow running from repo root or from testigo/
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from testigo.agents.base_agent import FactQuery
from testigo.app.config import Config
from testigo.data.record_store import RecordStore, merge_bundle
from testigo.nlu.fact_router import route_facts
from testigo.nlu.faq_matcher import filter_faq_scope, match_faq
from testigo.nlu.rules import is_category_or_price_query


def line(ch: str = "-", width: int = 60) -> str:
    return ch * width


def print_school(school: dict) -> None:
    print(line("="))
    print("AUTOŠKOLE")
    print(line("="))
    if not school:
        print("(no profile row, defaults will be used)")
    for key, value in school.items():
        print(f"- {key}: {value}")
    print()


def print_tables(results: dict) -> None:
    print(line("="))
    print("Tables")
    print(line("="))
    for key, result in results.items():
        if result.ok:
            print(f"- {key:<12} {len(result.rows):>4} rows  ({result.source})")
        else:
            print(f"- {key:<12} ERROR {result.error.table}: {result.error.message}")
    print()


def print_route(message: str, slug: str, school: dict, results: dict) -> None:
    data = merge_bundle(results)
    print(line("="))
    print(f"Routing: {message}")
    print(line("="))
    gated = is_category_or_price_query(message)
    print(f"category/price gate: {gated}")
    if not gated:
        answer = match_faq(message, filter_faq_scope(data.get("faq") or [], slug, Config.FAQ_SCOPE))
        print(f"FAQ: {answer or '(no match)'}")
    query = FactQuery.from_message(message, slug=slug, group_instructors=slug in Config.INSTRUCTOR_GROUPED_SLUGS)
    print(f"detected category: {query.category or '-'}")
    fact = route_facts(query, data, school)
    if fact:
        print(f"fact router [{fact.agent}]:")
        print(fact.text)
    else:
        print("fact router: (nothing, would call the model)")
    print()


def main() -> int:
    parser = argparse.ArgumentParser(description="Inspect a driving school's Airtable data")
    parser.add_argument("--slug", default=Config.SCHOOL_SLUG, help="school slug")
    parser.add_argument("--message", help="route this message through FAQ and fact router")
    args = parser.parse_args()

    missing = [name for name in Config.missing() if name != "OPENAI_API_KEY"]
    if missing:
        print(f"Missing configuration: {', '.join(missing)}")
        return 1

    store = RecordStore()
    slug = args.slug.strip().lower()
    school = store.fetch_school(slug)
    results = store.load_bundle(slug)
    print_school(school)
    print_tables(results)
    if args.message:
        print_route(args.message, slug, school, results)
    return 0


if __name__ == "__main__":
    sys.exit(main())
