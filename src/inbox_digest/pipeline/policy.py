from __future__ import annotations

import re
from typing import Dict, List, Mapping, Sequence

from inbox_digest.categories import CategoryTag, normalize_categories, ordered
from inbox_digest.models import ClassifiedMessage, ThreadDecision

_UNSAFE = re.compile(r"[^A-Za-z0-9 &+._-]")
_SPACES = re.compile(r"\s+")


def sanitize_label_segment(name: str | None) -> str:
    """Make a site name safe to use as one label path segment."""
    cleaned = _UNSAFE.sub("", name or "")
    return _SPACES.sub(" ", cleaned).strip(" .")


def label_path(prefix: str, *segments: str) -> str:
    parts = [p.strip("/") for p in (prefix, *segments) if p and p.strip("/")]
    return "/".join(parts)


def label_paths_for(prefix: str) -> Dict[CategoryTag, str]:
    """Static label path per category, e.g. Jobs/Sites -> "LLM/Jobs/Sites"."""
    return {tag: label_path(prefix, tag.value) for tag in CategoryTag}


def site_label_path(label_paths: Mapping[CategoryTag, str], site_name: str) -> str | None:
    segment = sanitize_label_segment(site_name)
    if not segment:
        return None
    return label_path(label_paths[CategoryTag.JOBS_SITES], segment)


def _decide(thread_id: str, items: Sequence[ClassifiedMessage], label_paths: Mapping[CategoryTag, str]) -> ThreadDecision:
    union = set()
    sites: List[str] = []
    seen = set()
    for item in items:
        union |= set(item.categories)
        # Gmail label names are case-insensitive; keep the first spelling.
        if item.site_name and item.site_name.casefold() not in seen:
            seen.add(item.site_name.casefold())
            sites.append(item.site_name)

    # Unknown is only labeled when nothing concrete is present.
    tags = normalize_categories(union)

    paths: List[str] = [label_paths[tag] for tag in ordered(tags)]
    if CategoryTag.JOBS_SITES in tags:
        for site in sites:
            path = site_label_path(label_paths, site)
            if path and path.lower() not in {p.lower() for p in paths}:
                paths.append(path)

    return ThreadDecision(
        thread_id=thread_id,
        categories=tags,
        site_names=tuple(sites),
        label_paths=tuple(paths),
        message_ids=tuple(i.message_id for i in items),
    )


def plan_thread_decisions(
    classified: Sequence[ClassifiedMessage], label_paths: Mapping[CategoryTag, str]
) -> List[ThreadDecision]:
    """Group by thread (first-seen order) and plan the labels for each thread."""
    groups: Dict[str, List[ClassifiedMessage]] = {}
    for item in classified:
        groups.setdefault(item.thread_id, []).append(item)
    return [_decide(tid, items, label_paths) for tid, items in groups.items()]
