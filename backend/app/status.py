from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from threading import Lock
from time import time
from typing import Any, Deque, Dict, List, Optional

# Finished runs kept for the UI.
HISTORY_SIZE = 10


@dataclass
class RunStatus:
    state: str = "idle"
    step: str = "idle"
    detail: Optional[str] = None
    summary: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    updated_at: float = field(default_factory=time)
    history: Deque[Dict[str, Any]] = field(default_factory=lambda: deque(maxlen=HISTORY_SIZE))


class RunStatusStore:
    """Progress of the current digest run, shared between the API and the worker thread."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._status = RunStatus()

    def update(self, **fields: Any) -> None:
        with self._lock:
            for key, value in fields.items():
                if key != "history" and hasattr(self._status, key):
                    setattr(self._status, key, value)
            self._status.updated_at = time()

    def begin(self) -> bool:
        """Mark a run as started. False if one is already in progress."""
        with self._lock:
            if self._status.state == "running":
                return False
            self._status.state = "running"
            self._status.step = "starting"
            self._status.detail = "Starting run"
            self._status.error = None
            self._status.updated_at = time()
            return True

    def finish(self, summary: Dict[str, Any]) -> None:
        self.update(state="done", step="done", detail="Run completed", summary=summary)
        self._record(outcome=summary.get("status", "digest"), subject=summary.get("subject"))

    def fail(self, exc: BaseException) -> None:
        self.update(state="error", step="error", detail=str(exc), error=type(exc).__name__)
        self._record(outcome="error", subject=None, error=type(exc).__name__)

    def _record(self, **entry: Any) -> None:
        with self._lock:
            entry["finished_at"] = self._status.updated_at
            self._status.history.append(entry)

    def is_running(self) -> bool:
        with self._lock:
            return self._status.state == "running"

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "state": self._status.state,
                "step": self._status.step,
                "detail": self._status.detail,
                "summary": dict(self._status.summary) if self._status.summary else None,
                "error": self._status.error,
                "updated_at": self._status.updated_at,
                "history": [dict(h) for h in self._status.history],
            }


run_status_store = RunStatusStore()
