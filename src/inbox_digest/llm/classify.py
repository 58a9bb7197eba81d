from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

import structlog
from openai import OpenAI, OpenAIError

from inbox_digest.categories import CategoryTag
from inbox_digest.models import EnrichedMessage, ModelResult

logger = structlog.get_logger(__name__)

# Per-message snippet sent to the model; the full snippet is kept for heuristics.
PROMPT_SNIPPET_CHARS = 1200

SYSTEM_PROMPT = (
    "You classify email messages for a personal inbox digest. "
    "For every message you receive, return exactly one item with the same messageId. "
    "Choose one or more categories from the allowed list. "
    "Jobs/Sites: notifications from job boards and applicant tracking systems. "
    "Jobs/Interview: application confirmations, interview scheduling, recruiter outreach. "
    "External/AcademicReview: peer-review correspondence (reviewer invitations, paper "
    "assignments, decisions, rebuttals). School: coursework, registration, campus administration. "
    "Internal: colleagues on the owner's domain. External/Work vs External/Personal: other "
    "human correspondence, split by whether it concerns work. Ads: marketing and promotions. "
    "Use Unknown only when nothing else fits. Each message carries a heuristic verdict you may "
    "use as a hint. Set jobSiteName to the job board's name when isJobSite is true, else null. "
    "Return ONLY JSON that matches the provided schema."
)

CLASSIFICATION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "messageId": {"type": "string"},
                    "categories": {
                        "type": "array",
                        "items": {"type": "string", "enum": [t.value for t in CategoryTag]},
                    },
                    "reasons": {"type": "array", "items": {"type": "string"}},
                    "isExternal": {"type": ["boolean", "null"]},
                    "isInternal": {"type": ["boolean", "null"]},
                    "isJobSite": {"type": "boolean"},
                    "isInterview": {"type": "boolean"},
                    "jobSiteName": {"type": ["string", "null"]},
                },
                "required": [
                    "messageId",
                    "categories",
                    "reasons",
                    "isExternal",
                    "isInternal",
                    "isJobSite",
                    "isInterview",
                    "jobSiteName",
                ],
            },
        }
    },
    "required": ["items"],
}

_FENCE_OPEN = re.compile(r"^\s*```[a-zA-Z0-9_-]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```\s*$")


def batch_payload(batch: Sequence[EnrichedMessage]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for item in batch:
        m = item.message
        out.append(
            {
                "messageId": m.message_id,
                "threadId": m.thread_id,
                "from": m.from_header,
                "to": m.to,
                "cc": m.cc,
                "date": m.date,
                "senderDomain": m.sender_domain,
                "subject": m.subject,
                "snippet": m.snippet[:PROMPT_SNIPPET_CHARS],
                "heuristic": {
                    "categories": sorted(t.value for t in item.heuristic.categories),
                    "siteName": item.heuristic.site_name,
                },
            }
        )
    return out


def _str_tuple(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value if isinstance(v, str) and v.strip())
    return ()


def _opt_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _opt_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _model_result(message_id: str, item: Dict[str, Any]) -> ModelResult:
    return ModelResult(
        message_id=message_id,
        categories=_str_tuple(item.get("categories")),
        reasons=_str_tuple(item.get("reasons")),
        is_job_site=bool(_opt_bool(item.get("isJobSite"))),
        is_interview=bool(_opt_bool(item.get("isInterview"))),
        job_site_name=_opt_str(item.get("jobSiteName")),
        is_internal=_opt_bool(item.get("isInternal")),
        is_external=_opt_bool(item.get("isExternal")),
    )


def parse_model_response(text: Optional[str]) -> Optional[Dict[str, ModelResult]]:
    """
    Defensive parse of the classifier output.

    Returns None when the payload as a whole is unusable (no JSON object, or no
    `items` array). Individual records without a string messageId are dropped.
    """
    if not text or not text.strip():
        return None

    cleaned = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text))
    start = cleaned.find("{")
    if start < 0:
        return None

    try:
        payload, _end = json.JSONDecoder().raw_decode(cleaned[start:])
    except json.JSONDecodeError:
        return None

    if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
        return None

    results: Dict[str, ModelResult] = {}
    for item in payload["items"]:
        if not isinstance(item, dict):
            continue
        message_id = item.get("messageId")
        if not isinstance(message_id, str) or not message_id.strip():
            logger.warning("model_record_without_message_id", record=item)
            continue
        results[message_id.strip()] = _model_result(message_id.strip(), item)
    return results


class ModelClassifier:
    """Sends one batch at a time to the OpenAI Responses API."""

    def __init__(self, client: OpenAI, model: str):
        self.client = client
        self.model = model

    def classify_batch(self, batch: Sequence[EnrichedMessage]) -> Optional[Dict[str, ModelResult]]:
        """Model results keyed by message id, or None if the whole call failed."""
        if not batch:
            return {}

        try:
            resp = self.client.responses.create(
                model=self.model,
                input=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": json.dumps(
                            {"messages": batch_payload(batch)}, ensure_ascii=False
                        ),
                    },
                ],
                text={
                    "format": {
                        "type": "json_schema",
                        "name": "email_classification",
                        "schema": CLASSIFICATION_SCHEMA,
                        "strict": True,
                    }
                },
            )
        except OpenAIError as exc:
            logger.warning(
                "classification_call_failed",
                batch_size=len(batch),
                error=f"{type(exc).__name__}: {exc}",
            )
            return None

        output_text = getattr(resp, "output_text", None)
        logger.debug("classification_raw_response", batch_size=len(batch), raw=output_text)

        parsed = parse_model_response(output_text)
        if parsed is None:
            logger.warning("classification_unparseable", batch_size=len(batch))
        return parsed
