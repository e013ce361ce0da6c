"""Payment terms agent."""
from typing import Any, Dict

from .base_agent import BaseAgent, Data, FactQuery
from ..data.formatters import payment_terms_text
from ..nlu.rules import asks_payment


class PaymentAgent(BaseAgent):
    name = "payment_terms"

    def matches(self, query: FactQuery) -> bool:
        return asks_payment(query.text)

    def handle(self, query: FactQuery, data: Data, school: Dict[str, Any]) -> str:
        terms = payment_terms_text(data.get("uvjeti") or [])
        return f"UVJETI PLAĆANJA:\n{terms}" if terms else ""
