"""Fact router: turn a message straight into an answer from the school's tables.

Handlers run in FACT_HANDLERS order; the first one whose trigger matches and
which produces text wins. An empty result sends the request on to the model.
"""
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from ..agents.base_agent import BaseAgent, Data, FactQuery
from ..agents.category_agent import CategoryHoursAgent, CategorySummaryAgent, EnrollmentAgent, MinimumAgeAgent
from ..agents.fleet_agent import FleetAgent
from ..agents.instructor_agent import InstructorAgent
from ..agents.location_agent import PartnerLocationAgent, SchoolLocationAgent
from ..agents.payment_agent import PaymentAgent
from ..schemas.io_models import AgentResult


class FactHandler(NamedTuple):
    name: str
    predicate: Callable[[FactQuery], bool]
    handler: Callable[[FactQuery, Data, Dict[str, Any]], str]


def _entry(agent: BaseAgent) -> FactHandler:
    return FactHandler(agent.name, agent.matches, agent.handle)


FACT_HANDLERS: List[FactHandler] = [
    _entry(SchoolLocationAgent()),
    _entry(InstructorAgent()),
    _entry(CategorySummaryAgent()),
    _entry(PartnerLocationAgent()),
    _entry(PaymentAgent()),
    _entry(FleetAgent()),
    _entry(MinimumAgeAgent()),
    _entry(EnrollmentAgent()),
    _entry(CategoryHoursAgent()),
]


def route_facts(query: FactQuery, data: Data, school: Dict[str, Any],
                handlers: Optional[List[FactHandler]] = None) -> Optional[AgentResult]:
    for entry in FACT_HANDLERS if handlers is None else handlers:
        if not entry.predicate(query):
            continue
        text = entry.handler(query, data, school or {})
        if text:
            return AgentResult(agent=entry.name, text=text)
    return None


def extract_facts(message: str, data: Data, school: Dict[str, Any], slug: str = "",
                  group_instructors: bool = False) -> str:
    """Formatted answer from the first handler that fires, or ""."""
    query = FactQuery.from_message(message, slug=slug, group_instructors=group_instructors)
    result = route_facts(query, data, school)
    return result.text if result else ""
