from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Callable, Dict

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from .config import get_settings
from .db import get_engine, init_db
from .providers import provider_from_settings
from .stores import SqlRowStore
from .tracker import ReimbursementTracker

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Reimbursement Tracker")


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def _startup() -> None:
    init_db()


@lru_cache()
def get_tracker() -> ReimbursementTracker:
    return ReimbursementTracker(
        settings=get_settings(),
        store=SqlRowStore(get_engine()),
        sync_provider=provider_from_settings(get_settings()),
    )


ACTIONS: Dict[str, Callable[[ReimbursementTracker, Dict[str, Any]], Dict[str, Any]]] = {
    "addReimbursement": ReimbursementTracker.add_reimbursement,
    "checkDuplicate": ReimbursementTracker.check_duplicate,
    "updateStatus": ReimbursementTracker.update_status,
    "listReimbursements": ReimbursementTracker.list_reimbursements,
    "getSummary": ReimbursementTracker.get_summary,
    "getReferenceData": ReimbursementTracker.get_reference_data,
    "addReferenceItem": ReimbursementTracker.add_reference_item,
    "initReferenceData": ReimbursementTracker.initialize_reference_data,
    "linkToExternalSystem": ReimbursementTracker.link_to_external_system,
    "linkToBudgetQuest": ReimbursementTracker.link_to_external_system,
    "syncNetCost": ReimbursementTracker.sync_net_cost,
    "ping": ReimbursementTracker.ping,
    "init": ReimbursementTracker.initialize,
    "getConfig": ReimbursementTracker.get_config,
}


def dispatch(tracker: ReimbursementTracker, params: Dict[str, Any]) -> Dict[str, Any]:
    action = params.get("action")
    if not action:
        return {"success": False, "error": "No action specified"}

    handler = ACTIONS.get(action)
    # Older clients prefix every action with "rt" (rtAddReimbursement, rtPing, ...)
    if handler is None and action.startswith("rt") and len(action) > 2:
        handler = ACTIONS.get(action[2].lower() + action[3:])
    if handler is None:
        logger.warning("Unknown action: %s", action)
        return {"success": False, "error": f"Unknown action: {action}"}

    logger.info("Handling action: %s", action)
    return handler(tracker, params)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/exec")
def exec_get(request: Request, tracker: ReimbursementTracker = Depends(get_tracker)) -> dict:
    params = dict(request.query_params)

    if params.get("action"):
        return dispatch(tracker, params)

    if params.get("test") == "true":
        return {
            "success": True,
            "message": "ReimbursementTracker API is working!",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "storeConfigured": tracker.store is not None,
        }

    return {"success": True, "message": "ReimbursementTracker API - Use ?action=ping to test"}


@app.post("/exec")
async def exec_post(request: Request, tracker: ReimbursementTracker = Depends(get_tracker)) -> dict:
    params: Dict[str, Any] = dict(request.query_params)

    body = await request.body()
    if body:
        try:
            data = json.loads(body)
        except ValueError:
            logger.warning("Ignoring non-JSON request body")
            data = None
        if isinstance(data, dict):
            params.update(data)

    return await run_in_threadpool(dispatch, tracker, params)


def main() -> None:
    """Launch the Uvicorn server with configuration from environment variables."""
    port = int(os.getenv("PORT", "8000"))
    logger.info("Starting server on port %d", port)
    uvicorn.run(
        "reimbursement_tracker.main:app",
        host="0.0.0.0",
        port=port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
