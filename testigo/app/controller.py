"""Controller / Orchestrator: FAQ check, fact router, then the model.

One call of `handle_query` serves one chat message for one school.
"""
from typing import Any, Dict, List, Optional

from .config import Config
from .generate import CompletionClient
from .preprocess import normalize_slug
from .prompt_builder import DEFAULT_SCHOOL, PromptBuilder, extract_ai_sections
from ..agents.base_agent import FactQuery
from ..data.record_store import RecordStore, merge_bundle
from ..nlu.fact_router import route_facts
from ..nlu.faq_matcher import filter_faq_scope, match_faq
from ..nlu.rules import is_category_or_price_query
from ..utils.logger import get_logger
from ..utils.security import mask_pii

logger = get_logger()

FAQ_SUFFIX = "\n\n(Odgovor iz FAQ baze)"
HISTORY_ROLES = {"user", "assistant"}


class Controller:
    def __init__(self, store: RecordStore = None, completion: CompletionClient = None,
                 builder: PromptBuilder = None):
        self.store = store or RecordStore()
        self.completion = completion or CompletionClient()
        self.builder = builder or PromptBuilder()

    def load_school(self, slug: str) -> Dict[str, Any]:
        school = self.store.fetch_school(slug)
        return school if school else dict(DEFAULT_SCHOOL)

    def inspect(self, slug: str):
        """Raw school row and per-table fetch results, for operators."""
        slug = normalize_slug(slug) or Config.SCHOOL_SLUG
        return slug, self.store.fetch_school(slug), self.store.load_bundle(slug)

    def _history(self, history: Optional[List[Dict[str, Any]]]) -> List[Dict[str, str]]:
        messages = []
        for item in (history or [])[-Config.HISTORY_LIMIT:]:
            if not isinstance(item, dict):
                continue
            role, content = item.get("role"), item.get("content")
            if role in HISTORY_ROLES and content:
                messages.append({"role": role, "content": str(content)})
        return messages

    def handle_query(self, message: str, slug: str = "",
                     history: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        slug = normalize_slug(slug) or Config.SCHOOL_SLUG
        logger.info(f"[WORKFLOW] 1. slug={slug} message='{mask_pii(message)}'")

        school = self.load_school(slug)
        data = merge_bundle(self.store.load_bundle(slug))
        logger.info("[WORKFLOW] 2. tables: " + ", ".join(f"{k}={len(v)}" for k, v in data.items()))

        # category / price questions always come from the tables, never the FAQ
        if not is_category_or_price_query(message):
            faq_rows = filter_faq_scope(data.get("faq") or [], slug, Config.FAQ_SCOPE)
            answer = match_faq(message, faq_rows)
            if answer:
                logger.info("[WORKFLOW] 3. FAQ hit")
                return {"reply": answer + FAQ_SUFFIX, "source": "faq"}

        query = FactQuery.from_message(message, slug=slug, group_instructors=slug in Config.INSTRUCTOR_GROUPED_SLUGS)
        fact = route_facts(query, data, school)
        if fact:
            logger.info(f"[WORKFLOW] 4. fact router: {fact.agent}")
            if Config.FACTS_DIRECT_REPLY:
                return {"reply": fact.text, "source": f"facts:{fact.agent}"}

        prompt = self.builder.build_prompt(
            school, data, facts=fact.text if fact else "", ai_sections=extract_ai_sections(data, slug)
        )
        messages = [{"role": "system", "content": prompt}]
        messages += self._history(history)
        messages.append({"role": "user", "content": message})

        logger.info("[WORKFLOW] 5. calling completion API")
        reply = self.completion.complete_or_fallback(messages, Config.OPENAI_TIMEOUT_SECONDS)
        return {"reply": reply, "source": "llm"}
