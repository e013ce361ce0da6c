"""Location agents: the school's own address and partner locations (exam centre, polygon, ...)."""
from typing import Any, Dict

from .base_agent import BaseAgent, Data, FactQuery
from ..data.fields import field
from ..data.formatters import format_location
from ..nlu.location_matcher import find_best_location
from ..nlu.rules import PARTNER_LOCATIONS, SCHOOL_LOCATION, contains_any

SCHOOL_OFFICE_KEYWORDS = ["autoskola", "ured", "sjediste", "poslovnica"]


class SchoolLocationAgent(BaseAgent):
    name = "school_location"

    def matches(self, query: FactQuery) -> bool:
        return contains_any(query.text, SCHOOL_LOCATION)

    def handle(self, query: FactQuery, data: Data, school: Dict[str, Any]) -> str:
        address = field(school, "address")
        description = field(school, "location_description")
        maps = field(school, "map_url")
        hours = field(school, "working_hours")
        lines = []
        if address:
            lines.append(f"• {address}")
        if description and description != address:
            lines.append(f"• {description}")
        if maps:
            lines.append(f"• Mapa: {maps}")
        if hours:
            lines.append(f"• Radno vrijeme: {hours}")
        if lines:
            return "\n".join(["ADRESA AUTOŠKOLE:"] + lines)

        office = find_best_location(data.get("lokacije"), SCHOOL_OFFICE_KEYWORDS)
        if office:
            return f"ADRESA AUTOŠKOLE:\n• {format_location(office)}"
        return ""


class PartnerLocationAgent(BaseAgent):
    """Exam centre, first aid course, medical exam and practice polygon."""
    name = "partner_location"

    def __init__(self, kinds=None):
        self.kinds = kinds or PARTNER_LOCATIONS

    def matches(self, query: FactQuery) -> bool:
        return any(contains_any(query.text, kind["triggers"]) for kind in self.kinds)

    def handle(self, query: FactQuery, data: Data, school: Dict[str, Any]) -> str:
        for kind in self.kinds:
            if not contains_any(query.text, kind["triggers"]):
                continue
            row = find_best_location(data.get("lokacije"), kind["keywords"])
            if row:
                return f"{kind['header']}:\n• {format_location(row)}"
        return ""
