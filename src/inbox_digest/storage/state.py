from __future__ import annotations
import json
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Dict, Optional

@dataclass
class AppState:
    last_run_at: Optional[str] = None
    # ISO date of the last digest (or no-activity notice) that went out.
    last_digest_date: Optional[str] = None
    last_counts: Dict[str, int] = field(default_factory=dict)
    runs: int = 0

def load_state(path: Path) -> AppState:
    if not path.exists():
        return AppState()
    data = json.loads(path.read_text(encoding="utf-8"))
    # Unknown keys from older versions are ignored.
    counts = data.get("last_counts") or {}
    return AppState(
        last_run_at=data.get("last_run_at"),
        last_digest_date=data.get("last_digest_date"),
        last_counts={str(k): int(v) for k, v in counts.items()} if isinstance(counts, dict) else {},
        runs=int(data.get("runs") or 0),
    )

def save_state(path: Path, state: AppState) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(state), indent=2), encoding="utf-8")
