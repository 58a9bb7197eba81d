# backend/app/api/run.py
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from backend.app.status import run_status_store
from inbox_digest.app.run import load_gmail_config, run_digest
from inbox_digest.config.paths import STATE_PATH
from inbox_digest.config.settings import load_config
from inbox_digest.errors import DigestError
from inbox_digest.gmail.client import GmailClient

router = APIRouter()


class RunRequest(BaseModel):
    dry_run: bool = False
    days: Optional[int] = None


def _execute(payload: RunRequest) -> dict:
    config = load_config().with_overrides(lookback_days=payload.days)
    client = GmailClient(load_gmail_config())
    client.connect()

    def progress_cb(step: str, event: dict[str, Any]) -> None:
        run_status_store.update(state="running", step=step, detail=event.get("detail"))

    return run_digest(
        config=config,
        client=client,
        dry_run=payload.dry_run,
        state_path=STATE_PATH,
        progress_cb=progress_cb,
    )


@router.post("/run")
async def run_endpoint(payload: Optional[RunRequest] = None) -> dict:
    payload = payload or RunRequest()
    # One run per mailbox at a time.
    if not run_status_store.begin():
        raise HTTPException(status_code=409, detail="A run is already in progress.")

    try:
        # Gmail and OpenAI calls block, so keep them off the event loop.
        summary = await run_in_threadpool(_execute, payload)
    except DigestError as exc:
        run_status_store.fail(exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        run_status_store.fail(exc)
        raise

    run_status_store.finish(summary)
    return {"ok": True, "summary": summary}


@router.get("/run/status")
async def run_status() -> dict:
    return {"ok": True, "status": run_status_store.snapshot()}
