"""Instructor roster agent."""
from typing import Any, Dict, List

from .base_agent import BaseAgent, Data, FactQuery
from ..app.preprocess import normalize
from ..data.fields import field
from ..nlu.rules import FUEL_TERMS, GENERIC_ENGINE_TERMS, INSTRUCTORS, contains_any

NO_LOCATION = "Ostalo"


class InstructorAgent(BaseAgent):
    name = "instructors"

    def matches(self, query: FactQuery) -> bool:
        return contains_any(query.text, INSTRUCTORS)

    def _line(self, row: Dict[str, Any], with_location: bool, with_engine: bool) -> str:
        line = f"• {field(row, 'instructor_name') or 'Instruktor'}"
        categories = field(row, "instructor_categories")
        vehicle = field(row, "instructor_vehicle")
        location = field(row, "instructor_location")
        engine = field(row, "instructor_engine")
        if categories:
            line += f" – {categories}"
        if vehicle:
            line += f" | {vehicle}"
        if with_location and location:
            line += f" | {location}"
        if with_engine and engine:
            line += f" | {engine}"
        return line

    def handle(self, query: FactQuery, data: Data, school: Dict[str, Any]) -> str:
        rows = [r for r in data.get("instruktori") or [] if field(r, "instructor_name")]
        if not rows:
            return ""

        # narrow to a location the user named
        location_hint = ""
        for row in rows:
            loc = field(row, "instructor_location")
            if loc and normalize(loc) and normalize(loc) in query.text:
                location_hint = loc
                break
        if location_hint:
            rows = [r for r in rows if normalize(field(r, "instructor_location")) == normalize(location_hint)]

        fuels = [t for t in FUEL_TERMS if t in query.text]
        engine_query = bool(fuels) or contains_any(query.text, GENERIC_ENGINE_TERMS)
        if fuels:
            by_fuel = [
                r for r in rows
                if any(t in normalize(f"{field(r, 'instructor_vehicle')} {field(r, 'instructor_engine')}") for t in fuels)
            ]
            rows = by_fuel or rows

        header = f"INSTRUKTORI – {location_hint}:" if location_hint else "INSTRUKTORI:"
        if query.group_instructors and not location_hint:
            return header + "\n" + self._grouped(rows, engine_query)
        lines = [self._line(r, with_location=not location_hint, with_engine=engine_query) for r in rows]
        return "\n".join([header] + lines)

    def _grouped(self, rows: List[Dict[str, Any]], engine_query: bool) -> str:
        groups: Dict[str, List[str]] = {}
        for row in rows:
            loc = field(row, "instructor_location") or NO_LOCATION
            groups.setdefault(loc, []).append(self._line(row, with_location=False, with_engine=engine_query))
        blocks = [f"📍 {loc}:\n" + "\n".join(lines) for loc, lines in groups.items()]
        return "\n\n".join(blocks)
