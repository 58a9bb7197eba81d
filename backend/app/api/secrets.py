from __future__ import annotations

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse
from google_auth_oauthlib.flow import InstalledAppFlow

from backend.app.status import run_status_store
from inbox_digest.config import paths
from inbox_digest.gmail.client import SCOPES
from inbox_digest.llm.credentials import load_openai_api_key

router = APIRouter()
_oauth_flows: dict[str, InstalledAppFlow] = {}


def _callback_url(request: Request) -> str:
    return f"{str(request.base_url).rstrip('/')}/api/secrets/oauth/callback"


def _read_upload(file: UploadFile, suffixes: tuple[str, ...]) -> bytes:
    if not file.filename or not file.filename.endswith(suffixes):
        raise HTTPException(status_code=400, detail=f"Expected a {' or '.join(suffixes)} file.")
    content = file.file.read()
    if not content or not content.strip():
        raise HTTPException(status_code=400, detail="Empty upload.")
    return content


@router.get("/secrets/status")
def secrets_status() -> dict:
    return {
        "ok": True,
        "secrets_dir": str(paths.SECRETS_DIR),
        "credentials_present": paths.GMAIL_CREDENTIALS_PATH.exists(),
        "token_present": paths.GMAIL_TOKEN_PATH.exists(),
        "openai_key_present": load_openai_api_key() is not None,
    }


@router.post("/secrets/credentials")
def upload_credentials(file: UploadFile = File(...)) -> dict:
    content = _read_upload(file, (".json",))
    paths.GMAIL_CREDENTIALS_PATH.write_bytes(content)
    return {"ok": True, "path": str(paths.GMAIL_CREDENTIALS_PATH)}


@router.post("/secrets/token")
def upload_token(file: UploadFile = File(...)) -> dict:
    content = _read_upload(file, (".json",))
    paths.GMAIL_TOKEN_PATH.write_bytes(content)
    return {"ok": True, "path": str(paths.GMAIL_TOKEN_PATH)}


@router.post("/secrets/openai")
def upload_openai_key(file: UploadFile = File(...)) -> dict:
    content = _read_upload(file, (".txt", ".json"))
    target = paths.OPENAI_TOKEN_JSON if file.filename.endswith(".json") else paths.OPENAI_TOKEN_TXT
    target.write_bytes(content)
    if load_openai_api_key() is None:
        target.unlink()
        raise HTTPException(status_code=400, detail="Upload did not contain an API key.")
    return {"ok": True, "path": str(target)}


@router.post("/secrets/oauth")
def start_oauth(request: Request) -> dict:
    if not paths.GMAIL_CREDENTIALS_PATH.exists():
        raise HTTPException(status_code=400, detail="Upload credentials.json first.")

    flow = InstalledAppFlow.from_client_secrets_file(str(paths.GMAIL_CREDENTIALS_PATH), SCOPES)
    flow.redirect_uri = _callback_url(request)
    auth_url, state = flow.authorization_url(
        access_type="offline",
        include_granted_scopes="true",
        prompt="consent",
    )
    # Store flow by state so callback can resume securely.
    _oauth_flows[state] = flow
    run_status_store.update(state="running", step="oauth", detail="Waiting for Google login")
    return {"ok": True, "auth_url": auth_url}


@router.get("/secrets/oauth/callback")
def oauth_callback(request: Request, state: str, code: str) -> HTMLResponse:
    flow = _oauth_flows.pop(state, None)
    if not flow:
        flow = InstalledAppFlow.from_client_secrets_file(
            str(paths.GMAIL_CREDENTIALS_PATH), SCOPES, state=state
        )
        flow.redirect_uri = _callback_url(request)

    try:
        flow.fetch_token(authorization_response=str(request.url))
    except Exception as exc:
        run_status_store.update(state="error", step="oauth", detail=str(exc))
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    paths.GMAIL_TOKEN_PATH.write_text(flow.credentials.to_json(), encoding="utf-8")
    run_status_store.update(state="done", step="oauth", detail="Gmail OAuth completed")
    return HTMLResponse("<h2>OAuth complete</h2><p>You can close this window.</p>")
