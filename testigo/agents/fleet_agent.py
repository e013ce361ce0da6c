"""Fleet agent: the school's vehicles, optionally narrowed by category and location."""
from typing import Any, Dict

from .base_agent import BaseAgent, Data, FactQuery
from ..app.preprocess import normalize
from ..data.fields import field
from ..data.formatters import list_vehicles
from ..nlu.rules import FLEET, contains_any


class FleetAgent(BaseAgent):
    name = "fleet"

    def matches(self, query: FactQuery) -> bool:
        return contains_any(query.text, FLEET)

    def handle(self, query: FactQuery, data: Data, school: Dict[str, Any]) -> str:
        rows = data.get("vozni") or []
        location = ""
        for row in rows:
            loc = field(row, "vehicle_location")
            if loc and normalize(loc) and normalize(loc) in query.text:
                location = loc
                break
        listing = list_vehicles(rows, query.category, location)
        if not listing:
            return ""
        header = "VOZNI PARK"
        if query.category:
            header += f" – Kategorija {query.category}"
        if location:
            header += f" – {location}"
        return f"{header}:\n{listing}"
