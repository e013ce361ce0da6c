"""BaseAgent interface for all fact agents."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List

from ..app.preprocess import detect_category, normalize

Data = Dict[str, List[Dict[str, Any]]]


@dataclass
class FactQuery:
    """A user message prepared once for every agent in the chain."""
    raw: str
    text: str
    category: str = ""
    slug: str = ""
    group_instructors: bool = False

    @classmethod
    def from_message(cls, message: str, slug: str = "", group_instructors: bool = False) -> "FactQuery":
        return cls(
            raw=message or "",
            text=normalize(message),
            category=detect_category(message),
            slug=slug,
            group_instructors=group_instructors,
        )


class BaseAgent(ABC):
    name: str = "base"

    @abstractmethod
    def matches(self, query: FactQuery) -> bool:
        """Cheap keyword trigger; no table access here."""
        ...

    @abstractmethod
    def handle(self, query: FactQuery, data: Data, school: Dict[str, Any]) -> str:
        """Return the formatted answer, or "" when the tables hold nothing for it."""
        ...
