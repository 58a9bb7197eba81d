from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import structlog
from openai import OpenAI, OpenAIError

from inbox_digest.digest.aggregate import DigestStats

logger = structlog.get_logger(__name__)

SUMMARY_PROMPT = (
    "You write a short daily email digest for the mailbox owner. "
    "You get aggregate counts per category, the most frequent job sites, and a sample "
    "of classified messages (sender, subject, category, site). "
    "Write 3-8 concise plain-text paragraphs or bullet lines: highlight interview and "
    "application activity first, then peer-review requests, school items, and anything "
    "that looks like it needs a reply. Do not invent senders or facts that are not in "
    "the data. No markdown headings, no HTML."
)


class DigestSummarizer:
    def __init__(self, client: OpenAI, model: str):
        self.client = client
        self.model = model

    def summarize(self, stats: DigestStats, sample: List[Dict[str, Any]]) -> Optional[str]:
        """Prose summary, or None when the call fails or returns nothing."""
        payload = {"stats": stats.as_dict(), "sample": sample}
        try:
            resp = self.client.responses.create(
                model=self.model,
                input=[
                    {"role": "system", "content": SUMMARY_PROMPT},
                    {"role": "user", "content": json.dumps(payload, ensure_ascii=False)},
                ],
            )
        except OpenAIError as exc:
            logger.warning("summary_call_failed", error=f"{type(exc).__name__}: {exc}")
            return None

        text = (getattr(resp, "output_text", None) or "").strip()
        if not text:
            logger.warning("summary_empty")
            return None
        return text
