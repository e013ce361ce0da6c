#!/usr/bin/env python3
"""
Main FastAPI application for the driving-school chatbot.
"""

import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from fastapi.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Config
from .controller import Controller
from .index_sync import FaqIndexSync, IndexSyncError, PeriodicSync
from .preprocess import normalize_slug
from ..schemas.io_models import AskRequest, AskResponse, DebugResponse, TableReport
from ..utils.logger import get_logger
from ..utils.security import check_admin_token

logger = get_logger()

_controller: Optional[Controller] = None
_index_sync: Optional[FaqIndexSync] = None
_periodic: Optional[PeriodicSync] = None


def get_controller() -> Controller:
    global _controller
    if _controller is None:
        _controller = Controller()
    return _controller


def get_index_sync() -> FaqIndexSync:
    global _index_sync
    if _index_sync is None:
        _index_sync = FaqIndexSync()
    return _index_sync


@asynccontextmanager
async def lifespan(app: FastAPI):
    # refuse to serve half configured
    Config.validate()
    global _periodic
    if Config.index_sync_enabled() and Config.FAQ_SYNC_INTERVAL_SECONDS > 0:
        _periodic = PeriodicSync(get_index_sync(), Config.FAQ_SYNC_INTERVAL_SECONDS)
        _periodic.start()
        logger.info(f"[SYNC] periodic FAQ sync every {Config.FAQ_SYNC_INTERVAL_SECONDS}s")
    yield
    if _periodic:
        _periodic.stop()


# Initialize FastAPI app
app = FastAPI(
    title="Testigo API",
    description="Chatbot for driving schools backed by Airtable and OpenAI",
    version=Config.PROMPT_VERSION,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"ok": False, "error": str(exc.detail)})


def resolve_slug(query_slug: Optional[str], header_slug: Optional[str]) -> str:
    """Query parameter beats the x-school-slug header, which beats the default."""
    return normalize_slug(query_slug) or normalize_slug(header_slug) or Config.SCHOOL_SLUG


async def read_ask_request(request: Request) -> AskRequest:
    if request.method == "GET":
        return AskRequest(q=request.query_params.get("q"))
    try:
        body = await request.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    return AskRequest(**body)


@app.api_route("/api/ask", methods=["GET", "POST"], response_model=AskResponse)
async def ask(request: Request, slug: Optional[str] = None,
              x_school_slug: Optional[str] = Header(None),
              controller: Controller = Depends(get_controller)):
    """Answer one chat message for one school."""
    try:
        try:
            payload = await read_ask_request(request)
        except ValidationError:
            return JSONResponse(status_code=400, content={"ok": False, "error": "Invalid request body"})
        message = payload.text
        if not message:
            return JSONResponse(status_code=400, content={"ok": False, "error": "Missing message (q)"})

        history = [{"role": h.role, "content": h.content or ""} for h in payload.history]
        result = await run_in_threadpool(
            controller.handle_query, message, resolve_slug(slug, x_school_slug), history
        )
        return {"ok": True, "reply": result["reply"]}
    except Exception:
        logger.exception("[API] /api/ask failed")
        return JSONResponse(status_code=500, content={"ok": False, "error": "Server error"})


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"ok": True, "version": Config.PROMPT_VERSION, "time": datetime.now(timezone.utc).isoformat()}


@app.get("/api/debug", response_model=DebugResponse)
async def debug(slug: Optional[str] = None, x_school_slug: Optional[str] = Header(None),
                controller: Controller = Depends(get_controller)):
    """Raw school row and table fetch results for operators."""
    resolved, school, results = await run_in_threadpool(controller.inspect, resolve_slug(slug, x_school_slug))
    tables = {
        key: TableReport(
            ok=r.ok,
            source=r.source,
            count=len(r.rows),
            rows=r.rows,
            error=None if r.ok else f"{r.error.table}: {r.error.message}",
        )
        for key, r in results.items()
    }
    return DebugResponse(slug=resolved, school=school, tables=tables)


def require_admin(x_admin_token: Optional[str] = Header(None), token: Optional[str] = None) -> None:
    if not Config.ADMIN_TOKEN:
        raise HTTPException(status_code=503, detail="Admin endpoints are disabled")
    if not check_admin_token(x_admin_token or token, Config.ADMIN_TOKEN):
        raise HTTPException(status_code=401, detail="Unauthorized")


@app.post("/api/admin/sync-faq", dependencies=[Depends(require_admin)])
async def sync_faq(force: bool = False, syncer: FaqIndexSync = Depends(get_index_sync)):
    """Rebuild the FAQ document and upload it to the vector store."""
    try:
        summary = await run_in_threadpool(syncer.sync, force)
    except IndexSyncError as e:
        logger.error(f"[SYNC] manual sync failed: {e}")
        return JSONResponse(status_code=502, content={"ok": False, "error": str(e)})
    return {"ok": True, **summary}


@app.get("/api/admin/search", dependencies=[Depends(require_admin)])
async def search_index(q: str = "", syncer: FaqIndexSync = Depends(get_index_sync)):
    """Search the vector store with a raw query."""
    if not q.strip():
        raise HTTPException(status_code=400, detail="Missing query (q)")
    try:
        hits = await run_in_threadpool(syncer.search, q)
    except IndexSyncError as e:
        logger.error(f"[SYNC] vector store search failed: {e}")
        return JSONResponse(status_code=502, content={"ok": False, "error": str(e)})
    return {"ok": True, "query": q, "results": hits}


def main():
    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"❗ {e}")
        sys.exit(1)
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=Config.PORT)


if __name__ == "__main__":
    main()
