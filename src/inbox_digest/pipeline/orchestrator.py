from __future__ import annotations

from typing import List, Optional, Protocol, Dict, Sequence

import structlog

from inbox_digest.models import ClassifiedMessage, EnrichedMessage, Message, ModelResult
from inbox_digest.pipeline.batching import partition
from inbox_digest.pipeline.merge import merge_batch
from inbox_digest.rules.classification import HeuristicClassifier

logger = structlog.get_logger(__name__)


class BatchClassifier(Protocol):
    def classify_batch(self, batch: Sequence[EnrichedMessage]) -> Optional[Dict[str, ModelResult]]: ...


def classify_messages(
    messages: Sequence[Message],
    heuristics: HeuristicClassifier,
    model: BatchClassifier,
    *,
    batch_size: int,
    drop_unmatched: bool = False,
) -> List[ClassifiedMessage]:
    """Heuristics -> batches -> model -> merge. Batches run sequentially and fail independently."""
    enriched = heuristics.enrich(messages)
    batches = partition(enriched, batch_size)

    known_sites = [sig.name for sig in heuristics.config.site_signatures]

    classified: List[ClassifiedMessage] = []
    fallbacks = 0
    for index, batch in enumerate(batches, start=1):
        try:
            outcome = model.classify_batch(batch)
        except Exception as exc:
            # Any classifier error counts as a failed batch.
            logger.error("batch_classifier_raised", batch=index, error=f"{type(exc).__name__}: {exc}")
            outcome = None
        if outcome is None:
            fallbacks += 1
            logger.warning("batch_heuristic_fallback", batch=index, of=len(batches), size=len(batch))
        classified.extend(merge_batch(batch, outcome, drop_unmatched=drop_unmatched, known_sites=known_sites))

    logger.info(
        "classification_done",
        messages=len(messages),
        classified=len(classified),
        batches=len(batches),
        fallback_batches=fallbacks,
    )
    return classified
