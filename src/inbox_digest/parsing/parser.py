from __future__ import annotations

import base64
import re
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup

from inbox_digest.models import Message
from inbox_digest.rules.matcher import sender_domain


def html_to_text(html: str, separator: str = " ") -> str:
    """Strip tags (and script/style content) from an HTML fragment."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return soup.get_text(separator=separator, strip=True)


def extract_body_from_payload(payload: dict) -> str:
    """
    Extract plain text body from Gmail message payload.
    Falls back to stripped HTML if plain text is unavailable.
    """
    def decode(data: str) -> str:
        return base64.urlsafe_b64decode(data).decode("utf-8", errors="replace")

    def find_part(part: dict, mime_type: str) -> Optional[str]:
        # Depth-first search through multipart payloads.
        if part.get("mimeType") == mime_type and part.get("body", {}).get("data"):
            return decode(part["body"]["data"])
        for child in part.get("parts", []) or []:
            found = find_part(child, mime_type)
            if found:
                return found
        return None

    text = find_part(payload, "text/plain")
    if text:
        return text

    html = find_part(payload, "text/html")
    if html:
        return html_to_text(html)

    # Single-part message without a declared text type.
    if payload.get("body", {}).get("data"):
        return decode(payload["body"]["data"])

    return ""


def _collapse(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def message_from_gmail(msg: Dict[str, Any], snippet_chars: int = 2000) -> Message:
    """Normalize one Gmail message resource (format=full) into a Message."""
    payload = msg.get("payload", {}) or {}
    # Header names are case-insensitive; Gmail usually sends canonical casing.
    lookup = {h["name"].lower(): h.get("value", "") for h in payload.get("headers", []) if "name" in h}

    body = _collapse(extract_body_from_payload(payload)) or _collapse(msg.get("snippet", ""))
    from_header = lookup.get("from", "")

    return Message(
        thread_id=str(msg.get("threadId") or msg.get("id") or ""),
        message_id=str(msg.get("id") or ""),
        from_header=from_header,
        subject=lookup.get("subject", ""),
        snippet=body[:snippet_chars],
        sender_domain=sender_domain(from_header),
        to=lookup.get("to", ""),
        cc=lookup.get("cc", ""),
        date=lookup.get("date", ""),
        internal_date_ms=int(msg.get("internalDate") or 0),
    )
