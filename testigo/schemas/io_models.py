"""Pydantic models for API I/O and agent contracts."""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

class HistoryMessage(BaseModel):
    role: str
    content: Optional[str] = ""

class AskRequest(BaseModel):
    q: Optional[str] = None
    message: Optional[str] = None
    history: List[HistoryMessage] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return (self.q or self.message or "").strip()

class AskResponse(BaseModel):
    ok: bool = True
    reply: str

class AgentResult(BaseModel):
    agent: str
    text: str

class TableReport(BaseModel):
    ok: bool
    source: str = ""
    count: int = 0
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    error: Optional[str] = None

class DebugResponse(BaseModel):
    ok: bool = True
    slug: str
    school: Dict[str, Any]
    tables: Dict[str, TableReport]
