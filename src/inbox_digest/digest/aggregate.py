from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

from inbox_digest.categories import CategoryTag, ordered
from inbox_digest.models import ClassifiedMessage


@dataclass(frozen=True)
class DigestStats:
    total: int
    # Every CategoryTag, in declaration order, including zeros.
    counts: Dict[CategoryTag, int] = field(default_factory=dict)
    # (site name, count), descending; ties keep first-seen order.
    top_sites: List[Tuple[str, int]] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "counts": {tag.value: n for tag, n in self.counts.items()},
            "topSites": [{"site": s, "count": n} for s, n in self.top_sites],
        }


def category_counts(classified: Sequence[ClassifiedMessage]) -> Dict[CategoryTag, int]:
    counts = {tag: 0 for tag in CategoryTag}
    for item in classified:
        for tag in item.categories:
            counts[tag] += 1
    return counts


def top_sites(classified: Sequence[ClassifiedMessage], limit: int = 10) -> List[Tuple[str, int]]:
    # Keyed case-insensitively; the first spelling seen is the one shown.
    freq: Dict[str, int] = {}
    spelling: Dict[str, str] = {}
    for item in classified:
        if CategoryTag.JOBS_SITES in item.categories and item.site_name:
            key = item.site_name.casefold()
            spelling.setdefault(key, item.site_name)
            freq[key] = freq.get(key, 0) + 1
    # sorted() is stable and dicts keep insertion order.
    ranked = sorted(freq.items(), key=lambda kv: kv[1], reverse=True)
    return [(spelling[key], n) for key, n in ranked[:limit]]


def aggregate(classified: Sequence[ClassifiedMessage], top_n: int = 10) -> DigestStats:
    return DigestStats(
        total=len(classified),
        counts=category_counts(classified),
        top_sites=top_sites(classified, top_n),
    )


def digest_sample(classified: Sequence[ClassifiedMessage], size: int = 200) -> List[Dict[str, Any]]:
    """First `size` messages, reduced to the fields the summarizer needs."""
    return [
        {
            "from": item.message.from_header,
            "subject": item.message.subject,
            "category": ", ".join(t.value for t in ordered(item.categories)),
            "site": item.site_name,
        }
        for item in classified[:size]
    ]
