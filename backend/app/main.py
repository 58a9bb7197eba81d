# backend/app/main.py
from fastapi import FastAPI

from backend.app.api.run import router as run_router
from backend.app.api.secrets import router as secrets_router
from inbox_digest.logging_setup import configure_logging

configure_logging()

app = FastAPI(title="inbox-digest API")
app.include_router(run_router, prefix="/api")
app.include_router(secrets_router, prefix="/api")


@app.get("/api/health")
def health() -> dict:
    return {"ok": True}
