"""
TESTIGO — System Documentation
==============================

This module-style README documents the architecture, request flow, data
sources and operational practices of the testigo driving-school chatbot.
It can be imported to inspect sections or printed for human consumption.

How to use this file
--------------------
- View in an editor for structured reading.
- Run `python README.py` to print the outline.

Table of Contents
-----------------
1. System Overview
2. Architecture
3. Request Flow
4. Data Sources (Airtable)
5. Fact Router
6. FAQ Matching
7. Prompt & Completion
8. FAQ Index Sync
9. Configuration & Environment
10. Testing Strategy
11. Security & PII Handling
12. Troubleshooting

"""

from __future__ import annotations

import textwrap


def section(title: str, body: str) -> str:
    return f"\n{title}\n{'-' * len(title)}\n{body.strip()}\n"


SYSTEM_OVERVIEW = section(
    "1. System Overview",
    """
    testigo answers Croatian chat messages for driving schools. Every school
    (tenant) is identified by a slug and keeps its profile, prices, fleet,
    instructors and partner locations in Airtable. Answers come, in order of
    preference, from the curated FAQ table, from deterministic fact handlers
    over the tables, and finally from the OpenAI chat-completions API.
    """,
)


ARCHITECTURE = section(
    "2. Architecture",
    """
    - HTTP: FastAPI app (`testigo/app/main.py`) exposing `/api/ask`, `/api/health`,
      `/api/debug` and token-protected `/api/admin/*`.
    - Orchestration: `testigo/app/controller.py` (FAQ -> facts -> model).
    - Data: `testigo/data/record_store.py` (Airtable REST via requests),
      `fields.py` (column aliases), `formatters.py` (money, locations, vehicles).
    - NLU: `testigo/nlu/` (trigger vocabularies, FAQ matcher, location matcher,
      fact router) and `testigo/agents/` (one agent per fact kind).
    - Generation: `prompt_builder.py` + `generate.py` with a hard timeout.
    """,
)


REQUEST_FLOW = section(
    "3. Request Flow",
    """
    1) Resolve slug: `?slug=` beats `x-school-slug` header beats SCHOOL_SLUG.
    2) Load the school row and every table concurrently; failed tables become empty.
    3) Category/price questions skip the FAQ; others try the strict FAQ matcher.
    4) Fact router: first matching handler with output wins.
    5) Otherwise build the system prompt and call the model (fallback text on error).
    """,
)


DATA_SOURCES = section(
    "4. Data Sources (Airtable)",
    """
    - AUTOŠKOLE: school profile and AI_* persona columns.
    - KATEGORIJE, CJENIK, PLAĆANJE HAK-u, UVJETI PLAĆANJA, DODATNE USLUGE,
      INSTRUKTORI, VOZNI PARK, LOKACIJE, NASTAVA & PREDAVANJA, UPIŠI SE ONLINE.
    - FAQ table, optionally in a separate global base (AIRTABLE_BASE_ID_GLOBAL).
    - Table and column spellings vary between bases; see `TABLES` and `FIELD_ALIASES`.
    - Rows are filtered by slug server-side first, locally as fallback.
    """,
)


FACT_ROUTER = section(
    "5. Fact Router",
    """
    Handlers in order: school_location, instructors, category_summary,
    partner_location, payment_terms, fleet, minimum_age, enrollment_conditions,
    category_hours. Kuna prices are shown in euro at 7.5345 kn/€.

    The monthly instalment in category_summary is the euro amount divided by
    12, so "6000 kn" reads "66 €/mj". The previous service divided the raw
    number and showed "500 €/mj" for the same cell.
    """,
)


FAQ_MATCHING = section(
    "6. FAQ Matching",
    """
    - Queries under 4 words or 12 characters never match.
    - Near-exact phrase containment, or enough shared words (Jaccard), is required.
    - FAQ_SCOPE=tenant restricts rows to the school's slug plus global rows.
    """,
)


PROMPT_AND_COMPLETION = section(
    "7. Prompt & Completion",
    """
    - The prompt always carries every data section, "(nema podataka)" when empty.
    - Router facts are placed first when FACTS_DIRECT_REPLY=false.
    - OPENAI_TIMEOUT_SECONDS bounds the call; timeouts and errors yield a fixed reply.
    """,
)


INDEX_SYNC = section(
    "8. FAQ Index Sync",
    """
    - The FAQ table is rendered to Markdown and uploaded to VECTOR_STORE_ID.
    - Uploads are skipped when the content hash is unchanged or the last sync
      is younger than FAQ_SYNC_MIN_INTERVAL_SECONDS.
    - FAQ_SYNC_INTERVAL_SECONDS > 0 runs the sync in a background thread.
    - POST /api/admin/sync-faq?force=true forces an upload.
    """,
)


CONFIG_ENV = section(
    "9. Configuration & Environment",
    """
    - Required: OPENAI_API_KEY, AIRTABLE_API_KEY, AIRTABLE_BASE_ID_INDIVIDUAL.
    - Optional: OPENAI_MODEL, OPENAI_BASE_URL, AIRTABLE_BASE_ID_GLOBAL, SCHOOL_SLUG,
      PORT, HISTORY_LIMIT, FAQ_SCOPE, FACTS_DIRECT_REPLY, INSTRUCTOR_GROUPED_SLUGS,
      ADMIN_TOKEN, VECTOR_STORE_ID, LOG_LEVEL.
    - `.env` is loaded with python-dotenv.
    """,
)


TESTING = section(
    "10. Testing Strategy",
    """
    - Unit tests per module in `tests/` (unittest classes, run with pytest).
    - HTTP end-to-end tests use FastAPI's TestClient with an in-memory Airtable fake.
    - `python tests/run_tests.py --all --coverage`.
    """,
)


SECURITY = section(
    "11. Security & PII Handling",
    """
    - Phone numbers and e-mail addresses are masked before logging.
    - Admin endpoints are disabled unless ADMIN_TOKEN is set; tokens are compared
      in constant time.
    """,
)


TROUBLESHOOTING = section(
    "12. Troubleshooting",
    """
    - Empty answers for one school: run `python testigo/scripts/inspect_tenant.py --slug <slug>`.
    - A table shows ERROR 404: the table name differs; add the variant to `TABLES`.
    - Service refuses to start: a required variable is missing (see section 9).
    """,
)


def as_text() -> str:
    return "\n".join(
        [
            SYSTEM_OVERVIEW,
            ARCHITECTURE,
            REQUEST_FLOW,
            DATA_SOURCES,
            FACT_ROUTER,
            FAQ_MATCHING,
            PROMPT_AND_COMPLETION,
            INDEX_SYNC,
            CONFIG_ENV,
            TESTING,
            SECURITY,
            TROUBLESHOOTING,
        ]
    )


def main() -> None:
    print(textwrap.dedent(as_text()))


if __name__ == "__main__":
    main()
