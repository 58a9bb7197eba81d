from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Protocol, Sequence

import structlog

from inbox_digest.gmail.labels import LabelContext
from inbox_digest.models import ApplyReport, ThreadDecision

logger = structlog.get_logger(__name__)


class ThreadLabeler(Protocol):
    def add_thread_labels(self, thread_id: str, label_ids: List[str]) -> Dict[str, Any]: ...


@dataclass
class ActionExecutor:
    client: ThreadLabeler
    labels: LabelContext
    dry_run: bool = False

    def apply(self, decisions: Sequence[ThreadDecision]) -> ApplyReport:
        report = ApplyReport()
        for decision in decisions:
            if not decision.label_paths:
                continue

            if self.dry_run:
                logger.info(
                    "dry_run_labels",
                    thread_id=decision.thread_id,
                    labels=list(decision.label_paths),
                )
                continue

            try:
                label_ids = [self.labels.resolve(p) for p in decision.label_paths]
                self.client.add_thread_labels(decision.thread_id, label_ids)
            except Exception as exc:
                report.failures += 1
                report.failed_threads.append(decision.thread_id)
                logger.error(
                    "thread_label_failed",
                    thread_id=decision.thread_id,
                    labels=list(decision.label_paths),
                    error=f"{type(exc).__name__}: {exc}",
                )
                continue

            report.threads_labeled += 1
            report.labels_applied += len(label_ids)
            logger.info("thread_labeled", thread_id=decision.thread_id, labels=list(decision.label_paths))
        return report
