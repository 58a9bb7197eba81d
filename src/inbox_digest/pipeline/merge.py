from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import structlog

from inbox_digest.categories import CategoryTag, normalize_categories
from inbox_digest.models import (
    ClassifiedMessage,
    EnrichedMessage,
    HeuristicResult,
    Message,
    ModelResult,
)

logger = structlog.get_logger(__name__)

HEURISTIC_FALLBACK = "heuristic-fallback"
HEURISTIC_MERGE = "heuristic-merge"


def canonical_site_name(name: Optional[str], known: Sequence[str]) -> Optional[str]:
    """Spell a site name the way it is configured when the two differ only in case."""
    if not name:
        return None
    key = name.casefold()
    for candidate in known:
        if candidate and candidate.casefold() == key:
            return candidate
    return name


def fallback(message: Message, heuristic: HeuristicResult) -> ClassifiedMessage:
    """Heuristic-only verdict, used when the model gave us nothing for this message."""
    return ClassifiedMessage(
        message=message,
        categories=normalize_categories(heuristic.categories),
        site_name=heuristic.site_name,
        reasons=(HEURISTIC_FALLBACK,),
    )


def merge(
    message: Message,
    heuristic: HeuristicResult,
    model: Optional[ModelResult],
    known_sites: Sequence[str] = (),
) -> ClassifiedMessage:
    """
    Reconcile one message's heuristic and model verdicts.

    The model is primary. Heuristics only fill gaps: a missing site name, or a
    model verdict that is empty / Unknown-only. A confident model verdict is
    never overridden. The model's site name is respelled to match the heuristic
    or a configured site when it differs only in case.
    """
    if model is None:
        return fallback(message, heuristic)

    model_tags = normalize_categories(model.categories)
    reasons = list(model.reasons)
    tags = set(model_tags)

    model_is_unknown = model_tags == {CategoryTag.UNKNOWN}
    if model_is_unknown and heuristic.categories:
        tags |= set(heuristic.categories)
        reasons.append(HEURISTIC_MERGE)

    site_name = canonical_site_name(model.job_site_name, (heuristic.site_name or "", *known_sites))

    return ClassifiedMessage(
        message=message,
        categories=normalize_categories(tags),
        site_name=site_name or heuristic.site_name,
        reasons=tuple(reasons),
        is_internal=model.is_internal,
        is_external=model.is_external,
        is_job_site=model.is_job_site,
        is_interview=model.is_interview,
    )


def merge_batch(
    batch: Sequence[EnrichedMessage],
    outcome: Optional[Dict[str, ModelResult]],
    *,
    drop_unmatched: bool = False,
    known_sites: Sequence[str] = (),
) -> List[ClassifiedMessage]:
    """
    Merge one batch with its model outcome. `outcome is None` means the whole
    call failed; every message then falls back to heuristics.

    Output order follows the batch. Model records whose id is not in the
    batch are discarded.
    """
    if outcome is None:
        return [fallback(e.message, e.heuristic) for e in batch]

    by_id = {e.message.message_id: e for e in batch}
    stray = [mid for mid in outcome if mid not in by_id]
    if stray:
        logger.warning("model_records_discarded", message_ids=stray)

    out: List[ClassifiedMessage] = []
    missing: List[str] = []
    for e in batch:
        result = outcome.get(e.message.message_id)
        if result is None:
            missing.append(e.message.message_id)
            if drop_unmatched:
                continue
            out.append(fallback(e.message, e.heuristic))
            continue
        out.append(merge(e.message, e.heuristic, result, known_sites))

    if missing:
        logger.warning(
            "model_records_missing",
            message_ids=missing,
            policy="drop" if drop_unmatched else HEURISTIC_FALLBACK,
        )
    return out
