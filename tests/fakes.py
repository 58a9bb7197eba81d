from __future__ import annotations

import base64
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

from openai import OpenAIError

from inbox_digest.models import Message
from inbox_digest.rules.matcher import sender_domain


def make_message(
    message_id: str,
    from_header: str = "someone@example.org",
    subject: str = "",
    snippet: str = "",
    thread_id: Optional[str] = None,
) -> Message:
    return Message(
        thread_id=thread_id or f"t-{message_id}",
        message_id=message_id,
        from_header=from_header,
        subject=subject,
        snippet=snippet,
        sender_domain=sender_domain(from_header),
    )


def gmail_message(
    message_id: str,
    thread_id: str,
    from_header: str,
    subject: str,
    body: str = "",
    label_ids: Optional[List[str]] = None,
) -> Dict[str, Any]:
    data = base64.urlsafe_b64encode(body.encode("utf-8")).decode("ascii")
    return {
        "id": message_id,
        "threadId": thread_id,
        "labelIds": label_ids or ["INBOX"],
        "snippet": body[:100],
        "internalDate": "1700000000000",
        "payload": {
            "mimeType": "multipart/alternative",
            "headers": [
                {"name": "From", "value": from_header},
                {"name": "To", "value": "owner@corp.com"},
                {"name": "Subject", "value": subject},
                {"name": "Date", "value": "Mon, 13 Oct 2025 09:00:00 +0000"},
            ],
            "body": {"size": 0},
            "parts": [{"mimeType": "text/plain", "body": {"data": data}}],
        },
    }


class FakeGmail:
    """In-memory stand-in for GmailClient with Gmail's label semantics."""

    def __init__(self, email: str = "owner@corp.com", threads: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.email = email
        self.threads = threads or {}
        self.labels: Dict[str, str] = {}
        self.thread_labels: Dict[str, set] = {}
        self.sent: List[Any] = []
        self.calls: List[str] = []
        self.search_error: Optional[Exception] = None
        self.profile_error: Optional[Exception] = None
        self.broken_threads: set = set()

    def get_profile(self) -> Dict[str, Any]:
        self.calls.append("get_profile")
        if self.profile_error:
            raise self.profile_error
        return {"emailAddress": self.email}

    def search_threads(self, query: str, max_results: int = 500) -> List[str]:
        self.calls.append("search_threads")
        if self.search_error:
            raise self.search_error
        return list(self.threads)[:max_results]

    def get_thread(self, thread_id: str, fmt: str = "full") -> Dict[str, Any]:
        return {"id": thread_id, "messages": self.threads[thread_id]}

    def list_labels(self) -> List[Dict[str, Any]]:
        return [{"id": i, "name": n} for n, i in self.labels.items()]

    def create_label(self, name: str, color: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        if name.lower() in {n.lower() for n in self.labels}:
            raise ValueError(f"Label name exists or conflicts: {name}")
        label_id = f"Label_{len(self.labels) + 1}"
        self.labels[name] = label_id
        return {"id": label_id, "name": name}

    def add_thread_labels(self, thread_id: str, label_ids: List[str]) -> Dict[str, Any]:
        if thread_id in self.broken_threads:
            raise RuntimeError(f"thread {thread_id} is gone")
        self.thread_labels.setdefault(thread_id, set()).update(label_ids)
        return {"id": thread_id}

    def label_names(self, thread_id: str) -> set:
        by_id = {i: n for n, i in self.labels.items()}
        return {by_id[i] for i in self.thread_labels.get(thread_id, set())}

    def send_message(self, msg) -> Dict[str, Any]:
        self.sent.append(msg)
        return {"id": f"sent-{len(self.sent)}"}


class FakeResponses:
    def __init__(self, handler: Callable[..., Any]):
        self.handler = handler
        self.calls: List[Dict[str, Any]] = []

    def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        result = self.handler(**kwargs)
        if isinstance(result, Exception):
            raise result
        return SimpleNamespace(output_text=result)


class FakeOpenAI:
    """Mimics `client.responses.create(...).output_text`."""

    def __init__(self, handler: Callable[..., Any]):
        self.responses = FakeResponses(handler)


def failing_openai(message: str = "connection reset") -> FakeOpenAI:
    return FakeOpenAI(lambda **_: OpenAIError(message))


class StaticSummarizer:
    def __init__(self, text: Optional[str]):
        self.text = text
        self.calls = 0

    def summarize(self, stats, sample) -> Optional[str]:
        self.calls += 1
        return self.text
