#!/usr/bin/env python3
"""
FAQ index sync for the driving-school chatbot.

The FAQ table is rendered into one Markdown document and uploaded to an OpenAI
vector store so it can be searched outside the strict FAQ matcher. Uploads are
debounced: nothing is sent when the document hash is unchanged or the previous
sync happened less than `min_interval` seconds ago.
"""

import hashlib
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import requests

from .config import Config
from ..data.fields import TABLES, field
from ..data.record_store import RecordStore
from ..nlu.faq_matcher import candidate_phrases, is_active
from ..utils.logger import get_logger

logger = get_logger("sync")

FAQ_FILENAME = "faq.md"


class IndexSyncError(Exception):
    """Building or uploading the FAQ document failed."""


@dataclass
class SyncState:
    """What was last uploaded and when; injectable so tests control the clock."""
    min_interval: float = 60.0
    last_hash: Optional[str] = None
    last_sync_at: Optional[float] = None
    last_file_id: Optional[str] = None

    def is_due(self, now: float, content_hash: Optional[str] = None) -> bool:
        if self.last_sync_at is not None and now - self.last_sync_at < self.min_interval:
            return False
        if content_hash is not None and content_hash == self.last_hash:
            return False
        return True

    def mark_synced(self, content_hash: str, now: float, file_id: Optional[str] = None) -> None:
        self.last_hash = content_hash
        self.last_sync_at = now
        self.last_file_id = file_id


def build_faq_document(rows: List[Dict[str, Any]]) -> str:
    """Active FAQ rows as Markdown, one section per question."""
    blocks = ["# FAQ autoškole"]
    for row in rows or []:
        answer = field(row, "faq_answer")
        phrases = candidate_phrases(row)
        if not is_active(row) or not answer or not phrases:
            continue
        block = [f"## {phrases[0]}"]
        if len(phrases) > 1:
            block.append("Drugi oblici pitanja: " + "; ".join(phrases[1:]))
        block.append("")
        block.append(answer)
        blocks.append("\n".join(block))
    return "\n\n".join(blocks) + "\n"


def content_hash(document: str) -> str:
    return hashlib.sha256(document.encode("utf-8")).hexdigest()


class FaqIndexSync:
    """Uploads the FAQ document to a vector store and searches it."""

    def __init__(self, store: RecordStore = None, state: SyncState = None, api_key: str = None,
                 base_url: str = None, vector_store_id: str = None, clock: Callable[[], float] = time.time):
        self.store = store or RecordStore()
        self.state = state or SyncState(min_interval=Config.FAQ_SYNC_MIN_INTERVAL_SECONDS)
        self.api_key = api_key or Config.OPENAI_API_KEY
        self.base_url = (base_url or Config.OPENAI_BASE_URL).rstrip("/")
        self.vector_store_id = vector_store_id or Config.VECTOR_STORE_ID
        self.clock = clock
        self._lock = threading.Lock()

    @property
    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}", "OpenAI-Beta": "assistants=v2"}

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            response = requests.request(method, f"{self.base_url}{path}", headers=self._headers, timeout=60, **kwargs)
        except requests.exceptions.RequestException as e:
            raise IndexSyncError(f"{method} {path}: {e}") from e
        if response.status_code >= 300:
            raise IndexSyncError(f"{method} {path}: HTTP {response.status_code} {response.text[:200]}")
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise IndexSyncError(f"{method} {path}: unreadable response body: {e}") from e

    def upload(self, document: str) -> str:
        uploaded = self._request(
            "POST", "/files",
            files={"file": (FAQ_FILENAME, document.encode("utf-8"), "text/markdown")},
            data={"purpose": "assistants"},
        )
        file_id = uploaded.get("id")
        if not file_id:
            raise IndexSyncError("file upload returned no id")
        self._request("POST", f"/vector_stores/{self.vector_store_id}/files", json={"file_id": file_id})
        return file_id

    def _detach(self, file_id: str) -> None:
        try:
            self._request("DELETE", f"/vector_stores/{self.vector_store_id}/files/{file_id}")
            self._request("DELETE", f"/files/{file_id}")
        except IndexSyncError as e:
            logger.warning(f"[SYNC] could not remove previous FAQ file {file_id}: {e}")

    def sync(self, force: bool = False) -> Dict[str, Any]:
        """
        Rebuild and upload the FAQ document when it is due.

        Args:
            force: Skip the debounce checks

        Returns:
            Summary with `synced`, `reason`, `hash`, `file_id` and `count`
        """
        if not self.vector_store_id:
            raise IndexSyncError("VECTOR_STORE_ID is not configured")
        with self._lock:
            try:
                result = self.store.fetch_all("faq", TABLES["faq"])
            except Exception as e:
                raise IndexSyncError(f"FAQ table unavailable: {e}") from e
            if not result.ok:
                raise IndexSyncError(f"FAQ table unavailable: {result.error.message}")
            document = build_faq_document(result.rows)
            digest = content_hash(document)
            now = self.clock()
            summary = {"hash": digest, "count": len(result.rows), "file_id": self.state.last_file_id}
            if not force and not self.state.is_due(now, digest):
                reason = "unchanged" if digest == self.state.last_hash else "debounced"
                logger.info(f"[SYNC] skipped ({reason})")
                return dict(summary, synced=False, reason=reason)

            previous = self.state.last_file_id
            file_id = self.upload(document)
            self.state.mark_synced(digest, now, file_id)
            if previous and previous != file_id:
                self._detach(previous)
            logger.info(f"[SYNC] uploaded FAQ document {file_id} ({len(result.rows)} rows)")
            return dict(summary, file_id=file_id, synced=True, reason="uploaded")

    def search(self, query: str, max_results: int = 5) -> List[Dict[str, Any]]:
        if not self.vector_store_id:
            raise IndexSyncError("VECTOR_STORE_ID is not configured")
        data = self._request(
            "POST", f"/vector_stores/{self.vector_store_id}/search",
            json={"query": query, "max_num_results": max_results},
        )
        hits = []
        for item in data.get("data", []):
            text = " ".join(part.get("text", "") for part in item.get("content", []) if part.get("type") == "text")
            hits.append({"file_id": item.get("file_id"), "score": item.get("score"), "text": text})
        return hits


class PeriodicSync:
    """Background thread that calls `sync()` every `interval` seconds."""

    def __init__(self, syncer: FaqIndexSync, interval: float):
        self.syncer = syncer
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def run_once(self) -> Optional[Dict[str, Any]]:
        try:
            return self.syncer.sync()
        except IndexSyncError as e:
            logger.error(f"[SYNC] periodic sync failed, next attempt in {self.interval}s: {e}")
        except Exception:
            logger.exception(f"[SYNC] periodic sync crashed, next attempt in {self.interval}s")
        return None

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            self.run_once()

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="faq-index-sync", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=5)
