from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Protocol

import structlog

from inbox_digest.gmail.LabelColors import color_for

logger = structlog.get_logger(__name__)


class LabelStore(Protocol):
    def list_labels(self) -> List[Dict[str, Any]]: ...
    def create_label(self, name: str, color: Optional[Dict[str, str]] = None) -> Dict[str, Any]: ...


class LabelContext:
    """
    Per-run label cache: label path -> Gmail label id.

    Built once at the start of a run and dropped at the end. Existing labels
    are loaded lazily on first use; missing ones (and their parents) are
    created on demand. Gmail label names are case-insensitive, so lookups
    are too: "Jobs/Sites/Linkedin" resolves to an existing "Jobs/Sites/LinkedIn".
    """

    def __init__(self, store: LabelStore, prefix: str):
        self.store = store
        self.prefix = prefix
        self._ids: Optional[Dict[str, str]] = None
        self.created: List[str] = []

    def _known(self) -> Dict[str, str]:
        if self._ids is None:
            self._ids = {lbl["name"].lower(): lbl["id"] for lbl in self.store.list_labels()}
        return self._ids

    def resolve(self, path: str) -> str:
        known = self._known()
        if path.lower() in known:
            return known[path.lower()]

        # Gmail nests on "/"; create parents first so the hierarchy shows up.
        parts = path.split("/")
        for depth in range(1, len(parts) + 1):
            partial = "/".join(parts[:depth])
            if partial.lower() in known:
                continue
            label = self.store.create_label(partial, color=color_for(partial, self.prefix))
            known[partial.lower()] = label["id"]
            self.created.append(partial)
            logger.info("label_created", label=partial, label_id=label["id"])
        return known[path.lower()]

    def provision(self, paths: Iterable[str]) -> Dict[str, str]:
        """Resolve a set of labels up front, e.g. the static category labels of a run."""
        return {p: self.resolve(p) for p in paths}
